from dataclasses import dataclass

import pytest

from rabbitkit.topology import (
    Exchange,
    ExchangeBinding,
    Queue,
    QueueBinding,
    Topologer,
    TopologyConfig,
)


class BrokerError(Exception):
    pass


class FakeChannel:
    def __init__(self, fail=(), counts=None):
        self.calls = []
        self.fail = set(fail)
        self.counts = counts or {}

    def _call(self, name, *args):
        self.calls.append((name, args))
        if name in self.fail or (args and args[0] in self.fail):
            raise BrokerError(name)

    def exchange_declare(self, *args):
        self._call("exchange_declare", *args)

    def exchange_declare_passive(self, *args):
        self._call("exchange_declare_passive", *args)

    def exchange_bind(self, *args):
        self._call("exchange_bind", *args)

    def exchange_unbind(self, *args):
        self._call("exchange_unbind", *args)

    def exchange_delete(self, *args):
        self._call("exchange_delete", *args)

    def queue_declare(self, *args):
        self._call("queue_declare", *args)

    def queue_declare_passive(self, *args):
        self._call("queue_declare_passive", *args)

    def queue_delete(self, *args):
        self._call("queue_delete", *args)
        return self.counts.get(args[0], 0)

    def queue_bind(self, *args):
        self._call("queue_bind", *args)

    def queue_unbind(self, *args):
        self._call("queue_unbind", *args)

    def queue_purge(self, *args):
        self._call("queue_purge", *args)
        return self.counts.get(args[0], 0)


@dataclass
class FakeHost:
    channel: FakeChannel
    channel_id: int


class FakePool:
    def __init__(self, channel, initialized=True):
        self.channel = channel
        self.initialized = initialized
        self.initialize_calls = 0
        self.returned = []
        self.flagged = []

    def initialize(self):
        self.initialize_calls += 1
        self.initialized = True

    def get_channel(self):
        return FakeHost(self.channel, 5)

    def return_channel(self, host, error_occurred):
        self.returned.append((host.channel_id, error_occurred))

    def flag_channel(self, channel_id):
        self.flagged.append(channel_id)


def make(fail=(), counts=None, initialized=True):
    channel = FakeChannel(fail, counts)
    pool = FakePool(channel, initialized)
    return Topologer(pool), pool, channel


def test_none_pool_raises():
    with pytest.raises(ValueError):
        Topologer(None)


def test_uninitialized_pool_is_initialized():
    _, pool, _ = make(initialized=False)
    assert pool.initialize_calls == 1
    assert pool.initialized is True


def test_initialized_pool_not_reinitialized():
    _, pool, _ = make()
    assert pool.initialize_calls == 0


def test_create_exchange_declares_and_returns_channel():
    top, pool, channel = make()
    top.create_exchange("ex", "topic", False, True, False, False, False, {"k": 1})
    assert channel.calls == [("exchange_declare", ("ex", "topic", True, False, False, False, {"k": 1}))]
    assert pool.returned == [(5, False)]
    assert pool.flagged == []


def test_create_exchange_passive():
    top, _, channel = make()
    top.create_exchange_from_config(Exchange(name="ex", type="fanout", passive_declare=True))
    assert channel.calls[0][0] == "exchange_declare_passive"


def test_failure_flags_channel_and_raises():
    top, pool, _ = make(fail={"exchange_declare"})
    with pytest.raises(BrokerError):
        top.create_exchange_from_config(Exchange(name="ex"))
    assert pool.flagged == [5]
    assert pool.returned == [(5, False)]


def test_create_queue_and_passive():
    top, _, channel = make()
    top.create_queue("q", False, True, True, False, False, None)
    top.create_queue_from_config(Queue(name="q2", passive_declare=True))
    assert channel.calls[0] == ("queue_declare", ("q", True, True, False, False, {}))
    assert channel.calls[1][0] == "queue_declare_passive"


def test_queue_delete_returns_count():
    top, _, channel = make(counts={"q": 4})
    assert top.queue_delete("q", True, False, False) == 4
    assert channel.calls == [("queue_delete", ("q", True, False, False))]


def test_bindings_pass_arguments_in_order():
    top, _, channel = make()
    top.queue_bind(QueueBinding(queue_name="q", exchange_name="ex", routing_key="rk"))
    top.exchange_bind(
        ExchangeBinding(exchange_name="child", parent_exchange_name="parent", routing_key="rk")
    )
    top.unbind_queue("q", "rk", "ex", None)
    top.exchange_unbind("child", "rk", "parent", True, {"a": "b"})
    top.exchange_delete("ex", True, False)
    assert channel.calls == [
        ("queue_bind", ("q", "rk", "ex", False, {})),
        ("exchange_bind", ("child", "rk", "parent", False, {})),
        ("queue_unbind", ("q", "rk", "ex", {})),
        ("exchange_unbind", ("child", "rk", "parent", True, {"a": "b"})),
        ("exchange_delete", ("ex", True, False)),
    ]


def test_purge_queues_sums_counts():
    top, _, _ = make(counts={"a": 2, "b": 3})
    assert top.purge_queues(["a", "b"], False) == 5


def test_purge_queues_empty_raises():
    top, _, _ = make()
    with pytest.raises(ValueError):
        top.purge_queues([], False)


def test_purge_queues_stops_on_error():
    top, _, channel = make(fail={"b"}, counts={"a": 1})
    with pytest.raises(BrokerError):
        top.purge_queues(["a", "b", "c"], False)
    assert [args[0] for _, args in channel.calls] == ["a", "b"]


def _config():
    return TopologyConfig(
        exchanges=[Exchange(name="ex1"), Exchange(name="ex2")],
        queues=[Queue(name="q1")],
        queue_bindings=[QueueBinding(queue_name="q1", exchange_name="ex1")],
        exchange_bindings=[ExchangeBinding(exchange_name="ex2", parent_exchange_name="ex1")],
    )


def test_build_topology_order():
    top, _, channel = make()
    top.build_topology(_config(), False)
    assert [name for name, _ in channel.calls] == [
        "exchange_declare",
        "exchange_declare",
        "queue_declare",
        "queue_bind",
        "exchange_bind",
    ]


def test_build_topology_stops_on_first_error():
    top, _, channel = make(fail={"ex1"})
    with pytest.raises(BrokerError):
        top.build_topology(_config(), False)
    assert len(channel.calls) == 1


def test_build_topology_ignores_errors():
    top, pool, channel = make(fail={"ex1"})
    top.build_topology(_config(), True)
    assert len(channel.calls) == 5
    assert pool.flagged == [5]


def test_build_empty_topology_does_nothing():
    top, pool, channel = make()
    top.build_topology(TopologyConfig(), False)
    assert channel.calls == []
    assert pool.returned == []