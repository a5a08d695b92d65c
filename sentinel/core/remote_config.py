import aiohttp
import logging

from sentinel.core.config import AddinConfig

logger = logging.getLogger("uvicorn")


async def fetch_remote_config(base_url: str, defaults: AddinConfig = None, timeout: float = 10.0) -> AddinConfig:
    """
    Fetches the runtime payload from a running asset/config service (/api/config)
    and overlays it on the defaults. Any failure keeps the defaults.
    """
    config = defaults or AddinConfig()
    if not base_url:
        return config

    url = f"{base_url.rstrip('/')}/api/config"
    try:
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as resp:
                if resp.status == 200:
                    data = await resp.json()
                    if isinstance(data, dict):
                        return config.merge_payload(data)
                    logger.warning(f"Config payload from {url} is not an object, using defaults")
                else:
                    logger.warning(f"Config service returned {resp.status} for {url}, using defaults")
    except Exception as e:
        logger.warning(f"Config service unreachable ({url}): {e}")

    return config
