"""Declaring, binding and removing broker topology through a channel pool."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Protocol


class Channel(Protocol):
    """The broker channel operations the topologer relies on."""

    def exchange_declare(self, name, kind, durable, auto_delete, internal, no_wait, args): ...
    def exchange_declare_passive(self, name, kind, durable, auto_delete, internal, no_wait, args): ...
    def exchange_bind(self, destination, routing_key, source, no_wait, args): ...
    def exchange_unbind(self, destination, routing_key, source, no_wait, args): ...
    def exchange_delete(self, name, if_unused, no_wait): ...
    def queue_declare(self, name, durable, auto_delete, exclusive, no_wait, args): ...
    def queue_declare_passive(self, name, durable, auto_delete, exclusive, no_wait, args): ...
    def queue_delete(self, name, if_unused, if_empty, no_wait) -> int: ...
    def queue_bind(self, name, routing_key, exchange, no_wait, args): ...
    def queue_unbind(self, name, routing_key, exchange, args): ...
    def queue_purge(self, name, no_wait) -> int: ...


class ChannelHost(Protocol):
    channel: Channel
    channel_id: int


class ChannelPool(Protocol):
    """A pool lending out channel hosts."""

    initialized: bool

    def initialize(self) -> None: ...
    def get_channel(self) -> ChannelHost: ...
    def return_channel(self, host: ChannelHost, error_occurred: bool) -> None: ...
    def flag_channel(self, channel_id: int) -> None: ...


@dataclass
class Exchange:
    name: str
    type: str = "direct"
    passive_declare: bool = False
    durable: bool = False
    auto_delete: bool = False
    internal_only: bool = False
    no_wait: bool = False
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class Queue:
    name: str
    passive_declare: bool = False
    durable: bool = False
    auto_delete: bool = False
    exclusive: bool = False
    no_wait: bool = False
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class QueueBinding:
    queue_name: str
    exchange_name: str
    routing_key: str = ""
    no_wait: bool = False
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class ExchangeBinding:
    exchange_name: str
    parent_exchange_name: str
    routing_key: str = ""
    no_wait: bool = False
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class TopologyConfig:
    exchanges: list[Exchange] = field(default_factory=list)
    queues: list[Queue] = field(default_factory=list)
    queue_bindings: list[QueueBinding] = field(default_factory=list)
    exchange_bindings: list[ExchangeBinding] = field(default_factory=list)


class Topologer:
    """Builds broker topology using channels borrowed from a pool."""

    def __init__(self, channel_pool: ChannelPool) -> None:
        if channel_pool is None:
            raise ValueError("channelpool can't be nil")
        if not channel_pool.initialized:
            channel_pool.initialize()
        self._pool = channel_pool

    def _run(self, operation):
        host = self._pool.get_channel()
        try:
            return operation(host.channel)
        except Exception:
            self._pool.flag_channel(host.channel_id)
            raise
        finally:
            self._pool.return_channel(host, False)

    @staticmethod
    def _each(items: Iterable, action, ignore_errors: bool) -> None:
        for item in items or ():
            try:
                action(item)
            except Exception:
                if not ignore_errors:
                    raise

    def build_topology(self, config: TopologyConfig, ignore_errors: bool = False) -> None:
        """Build exchanges, queues, queue bindings, then exchange bindings."""
        self.build_exchanges(config.exchanges, ignore_errors)
        self.build_queues(config.queues, ignore_errors)
        self.bind_queues(config.queue_bindings, ignore_errors)
        self.bind_exchanges(config.exchange_bindings, ignore_errors)

    def build_exchanges(self, exchanges: Iterable[Exchange], ignore_errors: bool = False) -> None:
        self._each(exchanges, self.create_exchange_from_config, ignore_errors)

    def build_queues(self, queues: Iterable[Queue], ignore_errors: bool = False) -> None:
        self._each(queues, self.create_queue_from_config, ignore_errors)

    def bind_queues(self, bindings: Iterable[QueueBinding], ignore_errors: bool = False) -> None:
        self._each(bindings, self.queue_bind, ignore_errors)

    def bind_exchanges(
        self, bindings: Iterable[ExchangeBinding], ignore_errors: bool = False
    ) -> None:
        self._each(bindings, self.exchange_bind, ignore_errors)

    def create_exchange(
        self,
        exchange_name: str,
        exchange_type: str,
        passive_declare: bool,
        durable: bool,
        auto_delete: bool,
        internal: bool,
        no_wait: bool,
        args: dict[str, Any] | None,
    ) -> None:
        self.create_exchange_from_config(
            Exchange(
                name=exchange_name,
                type=exchange_type,
                passive_declare=passive_declare,
                durable=durable,
                auto_delete=auto_delete,
                internal_only=internal,
                no_wait=no_wait,
                args=dict(args or {}),
            )
        )

    def create_exchange_from_config(self, exchange: Exchange) -> None:
        def declare(channel: Channel) -> None:
            method = (
                channel.exchange_declare_passive
                if exchange.passive_declare
                else channel.exchange_declare
            )
            method(
                exchange.name,
                exchange.type,
                exchange.durable,
                exchange.auto_delete,
                exchange.internal_only,
                exchange.no_wait,
                exchange.args,
            )

        self._run(declare)

    def exchange_bind(self, exchange_binding: ExchangeBinding) -> None:
        b = exchange_binding
        self._run(
            lambda ch: ch.exchange_bind(
                b.exchange_name, b.routing_key, b.parent_exchange_name, b.no_wait, b.args
            )
        )

    def exchange_delete(self, exchange_name: str, if_unused: bool, no_wait: bool) -> None:
        self._run(lambda ch: ch.exchange_delete(exchange_name, if_unused, no_wait))

    def exchange_unbind(
        self,
        exchange_name: str,
        routing_key: str,
        parent_exchange_name: str,
        no_wait: bool,
        args: dict[str, Any] | None,
    ) -> None:
        self._run(
            lambda ch: ch.exchange_unbind(
                exchange_name, routing_key, parent_exchange_name, no_wait, dict(args or {})
            )
        )

    def create_queue(
        self,
        queue_name: str,
        passive_declare: bool,
        durable: bool,
        auto_delete: bool,
        exclusive: bool,
        no_wait: bool,
        args: dict[str, Any] | None,
    ) -> None:
        self.create_queue_from_config(
            Queue(
                name=queue_name,
                passive_declare=passive_declare,
                durable=durable,
                auto_delete=auto_delete,
                exclusive=exclusive,
                no_wait=no_wait,
                args=dict(args or {}),
            )
        )

    def create_queue_from_config(self, queue: Queue) -> None:
        def declare(channel: Channel) -> None:
            method = (
                channel.queue_declare_passive if queue.passive_declare else channel.queue_declare
            )
            method(
                queue.name,
                queue.durable,
                queue.auto_delete,
                queue.exclusive,
                queue.no_wait,
                queue.args,
            )

        self._run(declare)

    def queue_delete(self, name: str, if_unused: bool, if_empty: bool, no_wait: bool) -> int:
        """Delete a queue and return the number of messages purged with it."""
        return self._run(lambda ch: ch.queue_delete(name, if_unused, if_empty, no_wait))

    def queue_bind(self, queue_binding: QueueBinding) -> None:
        b = queue_binding
        self._run(
            lambda ch: ch.queue_bind(
                b.queue_name, b.routing_key, b.exchange_name, b.no_wait, b.args
            )
        )

    def purge_queues(self, queue_names: Iterable[str], no_wait: bool) -> int:
        """Purge each queue in turn and return the total purged; stops on first error."""
        names = list(queue_names)
        if not names:
            raise ValueError("can't purge an empty array of queues")
        return sum(self.purge_queue(name, no_wait) for name in names)

    def purge_queue(self, queue_name: str, no_wait: bool) -> int:
        """Remove all unacknowledged-free messages from a queue and return the count."""
        return self._run(lambda ch: ch.queue_purge(queue_name, no_wait))

    def unbind_queue(
        self,
        queue_name: str,
        routing_key: str,
        exchange_name: str,
        args: dict[str, Any] | None,
    ) -> None:
        self._run(
            lambda ch: ch.queue_unbind(queue_name, routing_key, exchange_name, dict(args or {}))
        )