import logging
import os
import uvicorn

from sentinel.core.config import settings

logger = logging.getLogger("uvicorn")


def resolve_certificates(cert_dir: str = None):
    """Returns (keyfile, certfile) when both PEM files exist, else None."""
    cert_dir = cert_dir or settings.CERT_DIR
    key = os.path.join(cert_dir, "key.pem")
    cert = os.path.join(cert_dir, "cert.pem")
    if os.path.isfile(key) and os.path.isfile(cert):
        return key, cert
    return None


def run_server(host: str = "0.0.0.0", port: int = None):
    port = port or settings.PORT
    certs = resolve_certificates()

    if certs:
        key, cert = certs
        logger.info(f"{settings.PROJECT_NAME} Add-in Server running at https://localhost:{port}")
        logger.info(f"Manifest URL: https://localhost:{port}/manifest.xml")
        uvicorn.run("sentinel.main:app", host=host, port=port, log_level="info",
                    ssl_keyfile=key, ssl_certfile=cert)
    else:
        logger.warning(f"No certificates in {settings.CERT_DIR}, falling back to HTTP")
        logger.info(f"{settings.PROJECT_NAME} Add-in Server running at http://localhost:{port}")
        uvicorn.run("sentinel.main:app", host=host, port=port, log_level="info")
