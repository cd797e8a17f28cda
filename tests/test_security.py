from security import burn_verification, hash_password, verify_password


def test_hash_is_salted():
    assert hash_password("secret1") != hash_password("secret1")


def test_verify_correct_and_wrong():
    digest = hash_password("secret1")
    assert verify_password("secret1", digest)
    assert not verify_password("secret2", digest)


def test_malformed_digest_is_just_false():
    assert verify_password("secret1", "not-a-bcrypt-hash") is False


def test_burn_verification_always_false():
    assert burn_verification("anything") is False
