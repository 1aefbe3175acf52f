# rabbitkit

Building blocks for publishing to RabbitMQ:

- **Payloads** (`rabbitkit.payload`) – JSON-encode a value and optionally
  compress it (gzip or zstd) and encrypt it (AES-GCM), either as bare bytes or
  wrapped in a `ModdedLetter` that records what was done to the data.
- **Topology** (`rabbitkit.topology`) – declare, bind, unbind, purge and delete
  exchanges and queues through a `Topologer` that borrows channels from a pool.
- **Publishing** (`rabbitkit.publisher`) – a `Publisher` that sends `Letter`s
  directly, with retries, or from a buffered background loop, and reports each
  outcome as a `Notification`.
- **Helpers** – `rabbitkit.compression`, `rabbitkit.crypto` (Argon2id key
  derivation, AES-GCM), `rabbitkit.letters`, `rabbitkit.randomness` and
  `rabbitkit.tlsconfig`.

## Installation

```
pip install rabbitkit
```

## Payloads

```python
from rabbitkit.crypto import get_hash_with_argon
from rabbitkit.payload import (
    CompressionConfig,
    EncryptionConfig,
    create_payload,
    read_payload,
)

key = get_hash_with_argon("secret", "salt", 1, 64, 2, 32)
compression = CompressionConfig(enabled=True, type="zstd")
encryption = EncryptionConfig(enabled=True, type="aes", hashkey=key)

body = create_payload({"hello": "world"}, compression, encryption)
assert read_payload(body, compression, encryption) == b'{"hello":"world"}'
```

- Any compression type other than `"zstd"` is handled as gzip; every
  encryption type uses AES-GCM with a 12-byte nonce placed before the sealed
  data.
- `create_wrapped_payload(value, letter_id, metadata, compression, encryption)`
  returns the JSON of a `ModdedLetter`; its `ModdedBody` carries the flags
  `compressed`/`encrypted`, the types `ctype`/`etype`, a UTC timestamp and the
  base64-encoded data. `ModdedLetter.from_json` reads it back.
- `read_json_file(path)` parses a JSON file.

`get_hash_with_argon` and `get_string_hash_with_argon` raise `ValueError` for
an empty passphrase or salt; `decrypt_with_aes` raises `ValueError` when the
data is too short or fails authentication.

## Letters

```python
from rabbitkit.letters import create_letter, create_mock_letter

letter = create_letter(1, "", "MyQueue", b"hello world")   # retry_count == 3
mock = create_mock_letter(0, "", "MyQueue")                # id 1, body b"hello world"
```

`create_mock_random_letter(queue_name)` gives letters with sequential ids and
random bodies of 1500 to 2499 bytes.

## Channels and pools

The package does not open connections or channels itself and contains no AMQP
client. `Topologer` and `Publisher` work with a channel pool you supply: an
object with `get_channel()`, `return_channel(host, error_occurred)` and, as
each class needs, `flag_channel(channel_id)`, `initialized`/`initialize()` or
`shutdown()`. `get_channel()` returns a host with `channel` and `channel_id`.
The channel methods each class calls are described by the `Channel` protocols
in `rabbitkit.topology` and `rabbitkit.publisher`.

## Topology

```python
from rabbitkit.topology import Topologer

topologer = Topologer(channel_pool)
topologer.create_queue("MyQueue", False, True, False, False, False, None)
purged = topologer.purge_queues(["MyQueue"], False)
```

`build_topology(config, ignore_errors)` declares the exchanges, queues, queue
bindings and exchange bindings of a `TopologyConfig` in that order and raises
the first error unless `ignore_errors` is true. A channel whose operation fails
is flagged on the pool before the error is raised. `purge_queues` raises
`ValueError` for an empty list.

## Publishing

```python
from rabbitkit.publisher import Publisher, PublisherConfig

publisher = Publisher(PublisherConfig(), channel_pool)
publisher.start_auto_publish(False)
publisher.queue_letter(letter)

notification = publisher.notifications().get()
print(notification.letter_id, notification.success)

publisher.shutdown(True)
```

- `publish(letter)` tries once; `publish_with_retry(letter)` tries up to
  `letter.retry_count + 1` times.
- `queue_letter`/`queue_letters` block while `letter_buffer + max_over_buffer`
  letters are waiting.
- `stop_auto_publish()` signals the background loop to stop;
  `auto_publish_started()` reports whether it is running.
- `PublisherConfig` intervals are in milliseconds.

## TLS

`rabbitkit.tlsconfig.create_tls_config(pem_location, local_location)` builds an
`ssl.SSLContext` that trusts the CA certificates in `pem_location` and presents
the certificate and key held together in `local_location`.

## What is not included

There is no consumer, no connection management, no long-running service and
no command-line program; the package only provides the pieces above.

## Tests

```
pip install rabbitkit[test]
pytest
```