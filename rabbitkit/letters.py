"""Letters: message bodies with their routing envelope."""

from __future__ import annotations

import itertools
import random
import time
from dataclasses import dataclass, field
from typing import Any

from rabbitkit.randomness import RANDOM_MAX, RANDOM_MIN, random_bytes

_JSON_CONTENT_TYPE = "application/json"
_DEFAULT_MOCK_BODY = b"hello world"

_letter_ids = itertools.count()
_mock_random = random.Random(time.time_ns())


@dataclass
class Envelope:
    """Where and how a letter is published."""

    exchange: str = ""
    routing_key: str = ""
    content_type: str = ""
    mandatory: bool = False
    immediate: bool = False
    headers: dict[str, Any] = field(default_factory=dict)
    delivery_mode: int = 0


@dataclass
class Letter:
    """A message body together with its envelope and retry budget."""

    letter_id: int
    body: bytes
    envelope: Envelope
    retry_count: int = 0


def create_letter(
    letter_id: int, exchange_name: str, queue_name: str, body: bytes
) -> Letter:
    """Create a simple JSON letter with three retries."""
    envelope = Envelope(
        exchange=exchange_name,
        routing_key=queue_name,
        content_type=_JSON_CONTENT_TYPE,
    )
    return Letter(letter_id=letter_id, body=body, envelope=envelope, retry_count=3)


def create_mock_letter(
    letter_id: int, exchange_name: str, queue_name: str, body: bytes | None = None
) -> Letter:
    """Create a mock letter; an id of 0 becomes 1 and a missing body is "hello world"."""
    return create_letter(
        letter_id or 1,
        exchange_name,
        queue_name,
        _DEFAULT_MOCK_BODY if body is None else body,
    )


def create_mock_random_letter(queue_name: str) -> Letter:
    """Create a mock letter with a sequential id and a random-sized random body."""
    envelope = Envelope(
        exchange="",
        routing_key=queue_name,
        content_type=_JSON_CONTENT_TYPE,
    )
    size = _mock_random.randrange(RANDOM_MIN, RANDOM_MAX)
    return Letter(
        letter_id=next(_letter_ids),
        body=random_bytes(size),
        envelope=envelope,
        retry_count=0,
    )