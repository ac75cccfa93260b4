"""
Tests for page password hashing.
"""

import pytest

from sparklink.utils.passwords import hash_password, verify_password


def test_hash_format():
    encoded = hash_password("open-sesame")

    scheme, n, r, p, salt, digest = encoded.split("$")
    assert scheme == "scrypt"
    assert (n, r, p) == ("16384", "8", "1")
    assert len(salt) == 32
    assert len(digest) == 64


def test_hashes_are_salted():
    assert hash_password("same") != hash_password("same")


def test_verify():
    encoded = hash_password("open-sesame")

    assert verify_password("open-sesame", encoded) is True
    assert verify_password("Open-sesame", encoded) is False


def test_empty_password_rejected():
    with pytest.raises(ValueError):
        hash_password("")


@pytest.mark.parametrize("encoded", [None, "", "plaintext", "bcrypt$x$y$z$aa$bb", "scrypt$16384$8$1$zz$zz"])
def test_malformed_hashes_never_match(encoded):
    assert verify_password("anything", encoded) is False
