"""TLS client configuration for broker connections."""

from __future__ import annotations

import os
import ssl


def create_tls_config(
    pem_location: str | os.PathLike, local_location: str | os.PathLike
) -> ssl.SSLContext:
    """Build a client TLS context.

    ``pem_location`` holds the trusted CA certificates; ``local_location`` holds
    the client certificate and its private key in one file.
    """
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.load_verify_locations(cafile=os.fspath(pem_location))
    local = os.fspath(local_location)
    context.load_cert_chain(certfile=local, keyfile=local)
    return context