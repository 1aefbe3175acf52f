"""JSON payload building and reading with optional compression and encryption."""

from __future__ import annotations

import base64
import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from rabbitkit.compression import (
    compress_with_gzip,
    compress_with_zstd,
    decompress_with_gzip,
    decompress_with_zstd,
)
from rabbitkit.crypto import DEFAULT_NONCE_SIZE, decrypt_with_aes, encrypt_with_aes

GZIP_COMPRESSION_TYPE = "gzip"
ZSTD_COMPRESSION_TYPE = "zstd"
AES_SYMMETRIC_TYPE = "aes"

_RFC3339 = "%Y-%m-%dT%H:%M:%SZ"


@dataclass
class CompressionConfig:
    """Whether and how payloads are compressed; unknown types fall back to gzip."""

    enabled: bool = False
    type: str = GZIP_COMPRESSION_TYPE


@dataclass
class EncryptionConfig:
    """Whether and how payloads are encrypted; every type uses AES-GCM."""

    enabled: bool = False
    type: str = AES_SYMMETRIC_TYPE
    hashkey: bytes = b""
    time_consideration: int = 1
    memory_multiplier: int = 64
    threads: int = 1


@dataclass
class ModdedBody:
    """The wrapped, possibly compressed and encrypted, inner data."""

    encrypted: bool = False
    etype: str = ""
    compressed: bool = False
    ctype: str = ""
    utc_date_time: str = ""
    data: bytes = b""

    def to_dict(self) -> dict[str, Any]:
        return {
            "encrypted": self.encrypted,
            "etype": self.etype,
            "compressed": self.compressed,
            "ctype": self.ctype,
            "utc_date_time": self.utc_date_time,
            "data": base64.b64encode(self.data).decode("ascii"),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> ModdedBody:
        return cls(
            encrypted=bool(raw.get("encrypted", False)),
            etype=raw.get("etype", ""),
            compressed=bool(raw.get("compressed", False)),
            ctype=raw.get("ctype", ""),
            utc_date_time=raw.get("utc_date_time", ""),
            data=base64.b64decode(raw.get("data") or ""),
        )


@dataclass
class ModdedLetter:
    """A plaintext wrapper around a modified payload."""

    letter_id: int
    letter_metadata: str = ""
    body: ModdedBody = field(default_factory=ModdedBody)

    def to_json(self) -> bytes:
        return _dumps(
            {
                "letter_id": self.letter_id,
                "letter_metadata": self.letter_metadata,
                "body": self.body.to_dict(),
            }
        )

    @classmethod
    def from_json(cls, data: bytes | str) -> ModdedLetter:
        raw = json.loads(data)
        return cls(
            letter_id=raw["letter_id"],
            letter_metadata=raw.get("letter_metadata", ""),
            body=ModdedBody.from_dict(raw.get("body") or {}),
        )


def _dumps(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def read_json_file(path: str | os.PathLike) -> Any:
    """Read and parse a JSON file."""
    with open(path, "rb") as handle:
        return json.load(handle)


def _compress(compression: CompressionConfig, data: bytes) -> bytes:
    if compression.type == ZSTD_COMPRESSION_TYPE:
        return compress_with_zstd(data)
    return compress_with_gzip(data)


def _decompress(compression: CompressionConfig, data: bytes) -> bytes:
    if compression.type == ZSTD_COMPRESSION_TYPE:
        return decompress_with_zstd(data)
    return decompress_with_gzip(data)


def _encrypt(encryption: EncryptionConfig, data: bytes) -> bytes:
    return encrypt_with_aes(data, encryption.hashkey, DEFAULT_NONCE_SIZE)


def _decrypt(encryption: EncryptionConfig, data: bytes) -> bytes:
    return decrypt_with_aes(data, encryption.hashkey, DEFAULT_NONCE_SIZE)


def create_payload(
    value: Any,
    compression: CompressionConfig | None = None,
    encryption: EncryptionConfig | None = None,
) -> bytes:
    """Serialize ``value`` to JSON, then optionally compress and encrypt it."""
    data = _dumps(value)
    if compression is not None and compression.enabled:
        data = _compress(compression, data)
    if encryption is not None and encryption.enabled:
        data = _encrypt(encryption, data)
    return data


def create_wrapped_payload(
    value: Any,
    letter_id: int,
    metadata: str = "",
    compression: CompressionConfig | None = None,
    encryption: EncryptionConfig | None = None,
) -> bytes:
    """Serialize ``value`` inside a :class:`ModdedLetter` describing the modifications."""
    body = ModdedBody()
    inner = _dumps(value)
    if compression is not None and compression.enabled:
        inner = _compress(compression, inner)
        body.compressed = True
        body.ctype = compression.type
    if encryption is not None and encryption.enabled:
        inner = _encrypt(encryption, inner)
        body.encrypted = True
        body.etype = encryption.type
    body.utc_date_time = datetime.now(timezone.utc).strftime(_RFC3339)
    body.data = inner
    return ModdedLetter(letter_id=letter_id, letter_metadata=metadata, body=body).to_json()


def read_payload(
    data: bytes,
    compression: CompressionConfig | None = None,
    encryption: EncryptionConfig | None = None,
) -> bytes:
    """Undo :func:`create_payload`'s encryption and compression, returning the JSON bytes."""
    result = bytes(data)
    if encryption is not None and encryption.enabled:
        result = _decrypt(encryption, result)
    if compression is not None and compression.enabled:
        result = _decompress(compression, result)
    return result