"""RabbitMQ publishing helpers: payloads, topology, publisher, crypto and compression."""

__version__ = "0.1.0"

__all__ = [
    "compression",
    "crypto",
    "letters",
    "payload",
    "publisher",
    "randomness",
    "tlsconfig",
    "topology",
]