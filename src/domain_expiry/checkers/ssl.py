"""
SSL certificate checker for expiry monitoring.

Retrieves the peer leaf certificate of a host on port 443 and extracts its
expiration date, serial number and issuer organization.
"""

import asyncio
import logging
import socket
import ssl
import time
from datetime import datetime, timezone

from OpenSSL import crypto

from ..models import CertificateInfo
from .base_checker import BaseChecker, ProbeError, to_ascii_hostname

logger = logging.getLogger(__name__)

UNKNOWN_ISSUER = "Unknown"


def parse_certificate(cert_der: bytes) -> CertificateInfo:
    """
    Parse a DER-encoded certificate.

    Args:
        cert_der: Leaf certificate in DER form

    Returns:
        CertificateInfo with notAfter, hex serial and issuer organization

    Raises:
        ProbeError: If the certificate cannot be parsed
    """
    try:
        x509 = crypto.load_certificate(crypto.FILETYPE_ASN1, cert_der)
        # Format: b'20251105103000Z'
        not_after = x509.get_notAfter().decode('ascii')
        expiration_date = datetime.strptime(not_after, '%Y%m%d%H%M%SZ')
    except (crypto.Error, ValueError, AttributeError) as e:
        raise ProbeError(f"Certificate parse error: {e}") from e

    serial = format(x509.get_serial_number(), 'X')
    issuer = x509.get_issuer().O or UNKNOWN_ISSUER

    return CertificateInfo(
        expiration_date=expiration_date.replace(tzinfo=timezone.utc),
        serial=serial,
        issuer=issuer,
    )


class SSLChecker(BaseChecker):
    """
    Checker for TLS certificate expiry.

    Certificate and hostname validation are disabled on purpose: expired or
    mismatched certificates are exactly what needs to be reported.
    """

    PORT = 443

    def __init__(self, timeout: float = 5, handshake_timeout: float = 30):
        """
        Initialize the checker.

        Args:
            timeout: TCP connect timeout in seconds (default: 5)
            handshake_timeout: TLS handshake and read timeout in seconds (default: 30)
        """
        super().__init__(timeout=timeout)
        self.handshake_timeout = handshake_timeout

    async def check(self, hostname: str) -> CertificateInfo:
        """
        Fetch and parse the certificate served by a host.

        Args:
            hostname: Host to connect to

        Returns:
            CertificateInfo of the peer leaf certificate

        Raises:
            ProbeError: On timeout, missing or malformed certificate
            OSError: On resolution, connection or handshake failures
        """
        check_start_time = time.time()
        logger.debug(f"Starting SSL check for host: {hostname}")

        hostname_idn = to_ascii_hostname(hostname)

        loop = asyncio.get_running_loop()
        cert_der = await loop.run_in_executor(
            None,
            self._get_certificate_sync,
            hostname_idn,
            self.PORT
        )
        cert_info = parse_certificate(cert_der)

        logger.debug(
            f"SSL check completed for {hostname} in {time.time() - check_start_time:.3f}s: "
            f"serial={cert_info.serial} issuer={cert_info.issuer} "
            f"expires={cert_info.expiration_date.isoformat()}"
        )
        return cert_info

    def _get_certificate_sync(self, hostname: str, port: int) -> bytes:
        """
        Synchronous helper to get the DER certificate (runs in thread pool).

        Args:
            hostname: ASCII hostname to connect to
            port: The port to connect to

        Returns:
            Peer certificate in DER form
        """
        # Create context that doesn't verify certificates but still gets cert info
        context = ssl.create_default_context()
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

        try:
            sock = socket.create_connection((hostname, port), timeout=self.timeout)
        except socket.timeout as e:
            raise ProbeError("Connection timed out") from e

        with sock:
            # The connect timeout bounds the TCP connect only
            sock.settimeout(self.handshake_timeout)
            with context.wrap_socket(sock, server_hostname=hostname) as ssock:
                cert_der = ssock.getpeercert(binary_form=True)

        if not cert_der:
            raise ProbeError("No certificate found")

        return cert_der
