"""TLS client settings for sink transports."""

import ssl

from .config import TLSConfig
from .observability import get_logger


logger = get_logger(__name__)


class TLSConfigError(Exception):
    """Raised when the TLS block of a sink cannot be turned into a context."""


def build_ssl_context(tls: TLSConfig) -> ssl.SSLContext:
    """Build the client SSL context for a sink.

    A configured CA file replaces the system trust store. Client certificate
    and key must be given together.

    Raises:
        TLSConfigError: If files are missing, unreadable, or only one of
            certFile/keyFile is set
    """
    if bool(tls.cert_file) != bool(tls.key_file):
        raise TLSConfigError("both certFile and keyFile must be set for client authentication")

    try:
        context = ssl.create_default_context(
            cafile=str(tls.ca_file) if tls.ca_file else None
        )
        if tls.cert_file and tls.key_file:
            context.load_cert_chain(certfile=str(tls.cert_file), keyfile=str(tls.key_file))
    except (OSError, ssl.SSLError) as e:
        raise TLSConfigError(f"failed to load TLS material: {e}") from e

    if tls.insecure_skip_verify:
        logger.warning("tls_verification_disabled")
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    return context
