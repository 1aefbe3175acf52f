"""Gzip and Zstandard helpers for message bodies."""

from __future__ import annotations

import gzip

import zstandard


def compress_with_zstd(data: bytes) -> bytes:
    """Compress ``data`` into a single Zstandard frame."""
    return zstandard.ZstdCompressor().compress(bytes(data))


def decompress_with_zstd(data: bytes) -> bytes:
    """Decompress Zstandard data, including frames without a stored content size."""
    return zstandard.ZstdDecompressor().decompressobj().decompress(bytes(data))


def compress_with_gzip(data: bytes) -> bytes:
    """Compress ``data`` into a gzip stream."""
    return gzip.compress(bytes(data))


def decompress_with_gzip(data: bytes) -> bytes:
    """Decompress a gzip stream."""
    return gzip.decompress(bytes(data))