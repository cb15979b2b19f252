from types import SimpleNamespace

from storefinder.services.passwords import RESET_TOKEN_BYTES, PasswordHasher, generate_reset_token


def test_hash_and_verify():
    hasher = PasswordHasher()
    user = SimpleNamespace(password_hash=hasher.hash("hunter2"))

    assert user.password_hash != "hunter2"
    assert hasher.verify(user, "hunter2")
    assert not hasher.verify(user, "hunter3")


def test_verify_rejects_missing_hash_or_password():
    hasher = PasswordHasher()
    assert not hasher.verify(SimpleNamespace(password_hash=None), "hunter2")
    assert not hasher.verify(SimpleNamespace(password_hash=hasher.hash("x")), "")


def test_reset_tokens_are_random_hex():
    tokens = {generate_reset_token() for _ in range(20)}
    assert len(tokens) == 20
    for token in tokens:
        assert len(token) == RESET_TOKEN_BYTES * 2
        int(token, 16)
