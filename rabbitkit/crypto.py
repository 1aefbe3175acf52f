"""Argon2id key derivation and AES-GCM encryption helpers."""

from __future__ import annotations

import base64
import hmac
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.argon2 import Argon2id

DEFAULT_NONCE_SIZE = 12
_MAX_NONCE_SIZE = 32
_STRING_HASH_MEMORY_KIB = 64 * 1024


def _argon2id(
    passphrase: str,
    salt: str,
    iterations: int,
    memory_kib: int,
    threads: int,
    length: int,
) -> bytes:
    if not passphrase or not salt:
        raise ValueError("passphrase and salt can't be empty")
    iterations = iterations or 1
    threads = threads or 1
    # Argon2 needs at least eight blocks per lane.
    memory_kib = max(memory_kib, 8 * threads)
    kdf = Argon2id(
        salt=salt.encode(),
        length=length,
        iterations=iterations,
        lanes=threads,
        memory_cost=memory_kib,
    )
    return kdf.derive(passphrase.encode())


def get_hash_with_argon(
    passphrase: str,
    salt: str,
    time_consideration: int = 1,
    multiplier: int = 64,
    threads: int = 1,
    hash_length: int = 32,
) -> bytes:
    """Hash a passphrase with Argon2id using ``multiplier`` MiB of memory."""
    return _argon2id(
        passphrase, salt, time_consideration, multiplier * 1024, threads, hash_length
    )


def get_string_hash_with_argon(
    passphrase: str,
    salt: str,
    time_consideration: int = 1,
    threads: int = 1,
    hash_length: int = 32,
) -> str:
    """Hash a passphrase with Argon2id (64 MiB) and return it base64 encoded."""
    digest = _argon2id(
        passphrase,
        salt,
        time_consideration,
        _STRING_HASH_MEMORY_KIB,
        threads,
        hash_length,
    )
    return base64.b64encode(digest).decode("ascii")


def compare_argon2_hash(
    passphrase: str, salt: str, multiplier: int, hashed_password: bytes
) -> bool:
    """Hash the passphrase and compare it to ``hashed_password`` in constant time."""
    inbound = get_hash_with_argon(
        passphrase, salt, 1, multiplier, 1, len(hashed_password)
    )
    return hmac.compare_digest(inbound, bytes(hashed_password))


def encrypt_with_aes(
    data: bytes, hashed_key: bytes, nonce_size: int = DEFAULT_NONCE_SIZE
) -> bytes:
    """Encrypt with AES-GCM and return the nonce followed by the sealed data.

    A nonce size outside 12..32 falls back to 12.
    """
    if not data or not hashed_key:
        raise ValueError("data or hash can't be zero length")
    if not DEFAULT_NONCE_SIZE <= nonce_size <= _MAX_NONCE_SIZE:
        nonce_size = DEFAULT_NONCE_SIZE
    cipher = AESGCM(bytes(hashed_key))
    nonce = os.urandom(nonce_size)
    sealed = cipher.encrypt(nonce, bytes(data), None)
    if not sealed:
        raise ValueError("aes seal failed to generate encrypted data")
    return nonce + sealed


def decrypt_with_aes(
    cipher_data_with_nonce: bytes,
    hashed_key: bytes,
    nonce_size: int = DEFAULT_NONCE_SIZE,
) -> bytes:
    """Decrypt data produced by :func:`encrypt_with_aes`."""
    if (
        not cipher_data_with_nonce
        or not hashed_key
        or len(cipher_data_with_nonce) <= nonce_size
    ):
        raise ValueError(
            "cipher data or hash can't be zero length "
            "and cipher data must be longer than the nonce"
        )
    cipher = AESGCM(bytes(hashed_key))
    payload = bytes(cipher_data_with_nonce)
    try:
        return cipher.decrypt(payload[:nonce_size], payload[nonce_size:], None)
    except InvalidTag as exc:
        raise ValueError("message authentication failed") from exc