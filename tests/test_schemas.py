import pytest

from storefinder.errors import ValidationError
from storefinder.schemas import Registration, ReviewIn, StoreIn, validate_input
from storefinder.schemas.reviews import REVIEW_FIELD_MESSAGES
from storefinder.schemas.stores import STORE_FIELD_MESSAGES
from storefinder.schemas.users import USER_FIELD_MESSAGES


def store_form(**overrides):
    data = {
        "name": "Cafe Blue",
        "description": "",
        "tags": ["Wifi", " Wifi ", "", "Open Late"],
        "address": "1 King St",
        "lng": "-79.38",
        "lat": "43.65",
    }
    data.update(overrides)
    return data


def test_store_input_is_normalised():
    store = validate_input(StoreIn, store_form(), STORE_FIELD_MESSAGES)

    assert store.tags == ["Wifi", "Open Late"]
    assert store.description is None
    assert (store.lng, store.lat) == (-79.38, 43.65)


def test_single_tag_is_accepted():
    store = validate_input(StoreIn, store_form(tags="Wifi"), STORE_FIELD_MESSAGES)
    assert store.tags == ["Wifi"]


def test_missing_store_fields_use_friendly_messages():
    with pytest.raises(ValidationError) as exc_info:
        validate_input(StoreIn, store_form(name="  ", lng="", address=""), STORE_FIELD_MESSAGES)

    assert exc_info.value.errors == [
        "Please enter a store name!",
        "You must supply coordinates!",
        "You must supply an address!",
    ]
    assert exc_info.value.detail == {"errors": exc_info.value.errors}


def test_out_of_range_coordinates_are_rejected():
    with pytest.raises(ValidationError):
        validate_input(StoreIn, store_form(lat="91"), STORE_FIELD_MESSAGES)


def test_registration_lowercases_email():
    reg = validate_input(
        Registration,
        {"name": "Wes", "email": " Wes@Example.COM ", "password": "x"},
        USER_FIELD_MESSAGES,
    )
    assert reg.email == "wes@example.com"


def test_registration_rejects_bad_email():
    with pytest.raises(ValidationError) as exc_info:
        validate_input(Registration, {"name": "Wes", "email": "nope", "password": "x"}, USER_FIELD_MESSAGES)
    assert exc_info.value.message == "That Email is not valid!"


@pytest.mark.parametrize("rating", ["0", "6", "", "five"])
def test_review_rating_range(rating: str):
    with pytest.raises(ValidationError) as exc_info:
        validate_input(ReviewIn, {"rating": rating, "text": "ok"}, REVIEW_FIELD_MESSAGES)
    assert exc_info.value.message == REVIEW_FIELD_MESSAGES["rating"]


def test_unmapped_field_errors_fall_back_to_pydantic_message():
    with pytest.raises(ValidationError) as exc_info:
        validate_input(ReviewIn, {"rating": 3, "text": "x" * 5001})
    assert exc_info.value.message.startswith("text: ")
