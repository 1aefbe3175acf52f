"""Publishing letters through a channel pool, directly or from a background queue."""

from __future__ import annotations

import queue
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Protocol

from rabbitkit.letters import Letter

_MIN_POLL_SECONDS = 0.01


class Channel(Protocol):
    """The broker channel operation the publisher relies on."""

    def publish(
        self,
        exchange: str,
        routing_key: str,
        mandatory: bool,
        immediate: bool,
        *,
        body: bytes,
        content_type: str,
        headers: dict[str, Any],
        delivery_mode: int,
    ) -> None: ...


class ChannelHost(Protocol):
    channel: Channel
    channel_id: int


class ChannelPool(Protocol):
    """A pool lending out channel hosts."""

    def get_channel(self) -> ChannelHost: ...
    def return_channel(self, host: ChannelHost, error_occurred: bool) -> None: ...
    def shutdown(self) -> None: ...


@dataclass
class PublisherConfig:
    """Buffer sizes and sleep intervals (in milliseconds) for a publisher."""

    letter_buffer: int = 1000
    max_over_buffer: int = 1000
    sleep_on_idle_interval: int = 0
    sleep_on_queue_full_interval: int = 1
    sleep_on_error_interval: int = 0


@dataclass
class Notification:
    """The outcome of one publish attempt."""

    letter_id: int
    success: bool = False
    error: BaseException | None = None
    failed_letter: Letter | None = None


class Publisher:
    """Publishes letters and reports every outcome on its notification queue."""

    def __init__(self, config: PublisherConfig, channel_pool: ChannelPool) -> None:
        if channel_pool is None:
            raise ValueError("channel pool can't be None")
        self.config = config
        self.channel_pool = channel_pool
        self._letters: queue.Queue[Letter] = queue.Queue(maxsize=config.letter_buffer)
        self._notifications: queue.Queue[Notification] = queue.Queue()
        self._stops: queue.Queue[bool] = queue.Queue()
        self._letter_count = 0
        self._count_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._auto_started = False
        self._idle_seconds = config.sleep_on_idle_interval / 1000
        self._queue_full_seconds = config.sleep_on_queue_full_interval / 1000
        self._error_seconds = config.sleep_on_error_interval / 1000

    def publish(self, letter: Letter) -> None:
        """Publish a letter once; the outcome goes to the notifications."""
        try:
            host = self.channel_pool.get_channel()
        except Exception as exc:
            self._notify(letter, exc)
            return
        try:
            self._send(host.channel, letter)
        except Exception as exc:
            self._handle_error(exc, letter, host)
        else:
            self._notify(letter, None)
            self.channel_pool.return_channel(host, False)

    def publish_with_retry(self, letter: Letter) -> None:
        """Publish a letter, trying up to ``letter.retry_count + 1`` times."""
        for _ in range(letter.retry_count + 1):
            try:
                host = self.channel_pool.get_channel()
            except Exception:
                time.sleep(self._error_seconds)
                continue
            try:
                self._send(host.channel, letter)
            except Exception as exc:
                self._handle_error(exc, letter, host)
                continue
            self._notify(letter, None)
            self.channel_pool.return_channel(host, False)
            break

    def notifications(self) -> queue.Queue[Notification]:
        """The queue receiving every success and failure notification."""
        return self._notifications

    def start_auto_publish(self, allow_retry: bool = False) -> None:
        """Start publishing queued letters in the background."""
        self.flush_stops()
        worker = threading.Thread(
            target=self._auto_publish_loop, args=(allow_retry,), daemon=True
        )
        with self._state_lock:
            self._auto_started = True
        worker.start()

    def stop_auto_publish(self) -> None:
        """Signal the background publisher to stop; a no-op when it is not running."""
        with self._state_lock:
            if not self._auto_started:
                return
            self._stops.put(True)

    def queue_letters(self, letters: Iterable[Letter]) -> None:
        """Queue letters for auto-publishing, blocking while the buffer is full."""
        for letter in letters:
            self.queue_letter(letter)

    def queue_letter(self, letter: Letter) -> None:
        """Queue one letter for auto-publishing, blocking while the buffer is full."""
        limit = self.config.letter_buffer + self.config.max_over_buffer
        while self._current_count() >= limit:
            time.sleep(self._queue_full_seconds)
        with self._count_lock:
            self._letter_count += 1
        self._letters.put(letter)

    def auto_publish_started(self) -> bool:
        with self._state_lock:
            return self._auto_started

    def flush_stops(self) -> None:
        """Discard any pending stop signals."""
        while True:
            try:
                self._stops.get_nowait()
            except queue.Empty:
                return

    def shutdown(self, shutdown_pools: bool) -> None:
        """Stop auto-publishing and optionally shut down the channel pool."""
        self.stop_auto_publish()
        if shutdown_pools:
            self.channel_pool.shutdown()

    def _auto_publish_loop(self, allow_retry: bool) -> None:
        publish = self.publish_with_retry if allow_retry else self.publish
        poll = max(self._idle_seconds, _MIN_POLL_SECONDS)
        with ThreadPoolExecutor() as executor:
            while not self._stop_requested():
                try:
                    letter = self._letters.get(timeout=poll)
                except queue.Empty:
                    continue
                executor.submit(self._publish_and_release, publish, letter)
        with self._state_lock:
            self._auto_started = False

    def _publish_and_release(
        self, publish: Callable[[Letter], None], letter: Letter
    ) -> None:
        try:
            publish(letter)
        finally:
            with self._count_lock:
                self._letter_count -= 1

    def _stop_requested(self) -> bool:
        try:
            return self._stops.get_nowait()
        except queue.Empty:
            return False

    def _current_count(self) -> int:
        with self._count_lock:
            return self._letter_count

    def _handle_error(
        self, error: BaseException, letter: Letter, host: ChannelHost
    ) -> None:
        self.channel_pool.return_channel(host, True)
        self._notify(letter, error)
        time.sleep(self._error_seconds)

    @staticmethod
    def _send(channel: Channel, letter: Letter) -> None:
        envelope = letter.envelope
        channel.publish(
            envelope.exchange,
            envelope.routing_key,
            envelope.mandatory,
            envelope.immediate,
            body=letter.body,
            content_type=envelope.content_type,
            headers=dict(envelope.headers),
            delivery_mode=envelope.delivery_mode,
        )

    def _notify(self, letter: Letter, error: BaseException | None) -> None:
        if error is None:
            notification = Notification(letter_id=letter.letter_id, success=True)
        else:
            notification = Notification(
                letter_id=letter.letter_id, error=error, failed_letter=letter
            )
        self._notifications.put(notification)