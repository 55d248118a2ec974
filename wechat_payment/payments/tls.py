"""Client-certificate SSL context for the secure (``/secapi``) endpoints."""

import ssl
import tempfile
from pathlib import Path

from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat, pkcs12

from wechat_payment.core.exceptions import ConfigurationError

PKCS12_SUFFIXES = {".p12", ".pfx"}


def _pkcs12_to_pem(data: bytes, passphrase: str | None) -> bytes:
    password = passphrase.encode("utf-8") if passphrase else None
    try:
        key, cert, extra = pkcs12.load_key_and_certificates(data, password)
    except ValueError as e:
        raise ConfigurationError(message=f"Cannot load PKCS#12 certificate: {e}") from e

    if key is None or cert is None:
        raise ConfigurationError(message="PKCS#12 bundle has no key or certificate")

    pem = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    pem += cert.public_bytes(Encoding.PEM)
    for ca in extra or ():
        pem += ca.public_bytes(Encoding.PEM)
    return pem


def build_client_ssl_context(cert_path: Path, passphrase: str | None = None) -> ssl.SSLContext:
    """SSL context presenting the merchant certificate.

    Accepts a PEM bundle (key + certificate) or a PKCS#12 file.

    Raises:
        ConfigurationError: If the certificate cannot be loaded
    """
    context = ssl.create_default_context()
    cert_path = Path(cert_path)

    try:
        if cert_path.suffix.lower() in PKCS12_SUFFIXES:
            pem = _pkcs12_to_pem(cert_path.read_bytes(), passphrase)
            # ssl only loads chains from files
            with tempfile.TemporaryDirectory() as tmp:
                pem_path = Path(tmp) / "client.pem"
                pem_path.write_bytes(pem)
                context.load_cert_chain(pem_path)
        else:
            context.load_cert_chain(cert_path, password=passphrase)
    except (OSError, ssl.SSLError) as e:
        raise ConfigurationError(
            message=f"Cannot load client certificate: {e}",
            details={"cert_path": str(cert_path)},
        ) from e

    return context
