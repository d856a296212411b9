from typing import Dict

from .config import FetcherConfig


def default_headers(config: FetcherConfig) -> Dict[str, str]:
    headers = {
        "Authorization": config.sdk_key,
        "User-Agent": config.user_agent,
    }
    if config.wrapper_name:
        wrapper = config.wrapper_name
        if config.wrapper_version:
            wrapper += "/" + config.wrapper_version
        headers["X-LaunchDarkly-Wrapper"] = wrapper
    return headers
