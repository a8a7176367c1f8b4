# fleet_digest/common/truststore_context.py
"""
SSL verification settings for the Fleetio and LLM HTTP clients.

Both clients accept the same two knobs from configuration:

- verify_ssl: True (certifi bundle), False (no verification), or a path to
  a CA bundle file.
- use_truststore: build the SSLContext from the operating system's trust
  store instead, via the optional `truststore` package. This is what makes
  the tool work behind TLS-inspecting corporate proxies whose root CA is
  installed system-wide but unknown to certifi.

`truststore` is imported lazily so the package works without it unless
use_truststore is actually enabled.
"""

import logging
import ssl
from ssl import SSLContext

__all__: list[str] = ['build_truststore_ssl_context', 'resolve_ssl_verify']

logger: logging.Logger = logging.getLogger(__name__)


def build_truststore_ssl_context() -> SSLContext:
    """
    Create an SSLContext backed by the system certificate store.

    Returns:
        SSLContext using PROTOCOL_TLS_CLIENT and the OS trust store.

    Raises:
        RuntimeError: If truststore is not installed.
    """
    try:
        import truststore  # noqa: PLC0415
    except ImportError as import_error:
        raise RuntimeError(
            'truststore is required when use_truststore=True; '
            'install it with: pip install "fleet-digest[truststore]"'
        ) from import_error

    ssl_context: SSLContext = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    return ssl_context


def resolve_ssl_verify(
    verify_ssl: bool | str,
    use_truststore: bool,
) -> SSLContext | bool | str:
    """
    Pick the value to hand to httpx.Client(verify=...).

    Args:
        verify_ssl: Configured verification mode (bool or CA bundle path).
        use_truststore: Whether to prefer the system trust store.

    Returns:
        SSLContext when use_truststore is set, otherwise verify_ssl unchanged.
    """
    if use_truststore:
        logger.debug('Building SSLContext from system trust store')
        return build_truststore_ssl_context()

    logger.debug('Using SSL verification setting: %r', verify_ssl)
    return verify_ssl
