import base64

import pytest

from rabbitkit.crypto import (
    compare_argon2_hash,
    decrypt_with_aes,
    encrypt_with_aes,
    get_hash_with_argon,
    get_string_hash_with_argon,
)

PASSPHRASE = "secret"
SALT = "saltysaltysalt"
KEY = bytes(range(32))


def test_argon_hash_has_requested_length_and_is_deterministic():
    first = get_hash_with_argon(PASSPHRASE, SALT, 1, 1, 1, 32)
    second = get_hash_with_argon(PASSPHRASE, SALT, 1, 1, 1, 32)
    assert len(first) == 32
    assert first == second


def test_argon_hash_depends_on_salt():
    first = get_hash_with_argon(PASSPHRASE, SALT, 1, 1, 1, 32)
    other = get_hash_with_argon(PASSPHRASE, "pepperpepper", 1, 1, 1, 32)
    assert first != other


def test_argon_zero_time_and_threads_default_to_one():
    assert get_hash_with_argon(PASSPHRASE, SALT, 0, 1, 0, 16) == get_hash_with_argon(
        PASSPHRASE, SALT, 1, 1, 1, 16
    )


def test_argon_rejects_empty_inputs():
    with pytest.raises(ValueError):
        get_hash_with_argon("", SALT, 1, 1, 1, 32)
    with pytest.raises(ValueError):
        get_hash_with_argon(PASSPHRASE, "", 1, 1, 1, 32)


def test_string_hash_is_base64_of_requested_length():
    encoded = get_string_hash_with_argon(PASSPHRASE, SALT, 1, 1, 32)
    assert len(base64.b64decode(encoded)) == 32
    assert encoded == get_string_hash_with_argon(PASSPHRASE, SALT, 1, 1, 32)


def test_string_hash_rejects_empty_passphrase():
    with pytest.raises(ValueError):
        get_string_hash_with_argon("", SALT, 1, 1, 32)


def test_compare_argon2_hash_matches_and_mismatches():
    stored = get_hash_with_argon(PASSPHRASE, SALT, 1, 1, 1, 32)
    assert compare_argon2_hash(PASSPHRASE, SALT, 1, stored) is True
    assert compare_argon2_hash("password", SALT, 1, stored) is False


def test_compare_argon2_hash_rejects_empty_passphrase():
    with pytest.raises(ValueError):
        compare_argon2_hash("", SALT, 1, b"\x00" * 32)


def test_aes_round_trip():
    data = b"SuperStreetFighter2TurboMBisonDidNothingWrong"
    sealed = encrypt_with_aes(data, KEY, 12)
    assert sealed[12:] != data
    assert decrypt_with_aes(sealed, KEY, 12) == data


def test_aes_nonces_differ_between_calls():
    data = b"same input"
    first = encrypt_with_aes(data, KEY, 12)
    second = encrypt_with_aes(data, KEY, 12)
    # 12-byte nonce + ciphertext of equal length + 16-byte GCM tag
    assert len(first) == 12 + len(data) + 16
    assert len(second) == len(first)
    assert first[:12] != second[:12]
    assert decrypt_with_aes(first, KEY, 12) == data
    assert decrypt_with_aes(second, KEY, 12) == data


def test_aes_custom_nonce_size_round_trip():
    data = b"payload"
    sealed = encrypt_with_aes(data, KEY, 24)
    assert decrypt_with_aes(sealed, KEY, 24) == data


def test_aes_out_of_range_nonce_falls_back_to_default():
    data = b"payload"
    sealed = encrypt_with_aes(data, KEY, 5)
    assert decrypt_with_aes(sealed, KEY, 12) == data


def test_aes_rejects_empty_data_and_key():
    with pytest.raises(ValueError):
        encrypt_with_aes(b"", KEY, 12)
    with pytest.raises(ValueError):
        encrypt_with_aes(b"data", b"", 12)


def test_aes_rejects_bad_key_length():
    with pytest.raises(ValueError):
        encrypt_with_aes(b"data", b"short", 12)


def test_aes_decrypt_rejects_tampered_data():
    sealed = bytearray(encrypt_with_aes(b"payload", KEY, 12))
    sealed[-1] ^= 0xFF
    with pytest.raises(ValueError):
        decrypt_with_aes(bytes(sealed), KEY, 12)


def test_aes_decrypt_rejects_wrong_key():
    sealed = encrypt_with_aes(b"payload", KEY, 12)
    with pytest.raises(ValueError):
        decrypt_with_aes(sealed, bytes(reversed(KEY)), 12)


def test_aes_decrypt_rejects_data_no_longer_than_nonce():
    with pytest.raises(ValueError):
        decrypt_with_aes(b"\x00" * 12, KEY, 12)