from storefinder.services.store_repository import StorePage, page_offset


def test_page_offset():
    assert page_offset(1, 4) == 0
    assert page_offset(3, 4) == 8
    # Page numbers below 1 behave like page 1
    assert page_offset(0, 4) == 0


def test_page_count_rounds_up():
    page = StorePage(stores=["a"], page=1, page_size=4, count=5)
    assert page.page_count == 2
    assert page.last_page == 2
    assert not page.out_of_range


def test_page_past_the_end_is_out_of_range():
    page = StorePage(stores=[], page=99, page_size=4, count=5)
    assert page.out_of_range
    assert page.last_page == 2


def test_empty_directory_first_page_is_not_out_of_range():
    page = StorePage(stores=[], page=1, page_size=4, count=0)
    assert page.page_count == 0
    assert page.last_page == 1
    assert not page.out_of_range
