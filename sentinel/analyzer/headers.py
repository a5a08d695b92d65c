import logging

logger = logging.getLogger("sentinel-addin")

HEADERS_UNAVAILABLE = "Headers unavailable"


def is_simulated_phishing(headers: str, marker: str) -> bool:
    """
    Checks the raw header block for the simulation platform's marker header.
    Never raises: any problem classifies the message as not simulated.
    """
    try:
        if headers and marker and marker in headers:
            logger.info("Simulated phishing email detected from GoPhish")
            return True
        return False
    except Exception as e:
        logger.warning(f"Error checking for simulated phishing: {e}")
        return False
