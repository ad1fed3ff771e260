"""
Per-request proxy configuration.

The policy fields are read from the environment on every request so an
operator can change them without restarting; nothing here is cached or
mutated between requests.
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from hubproxy.vars import DEFAULT_PROXY_HOSTNAME, DEFAULT_PROXY_PROTOCOL


@dataclass(frozen=True)
class ProxyConfig:
    proxy_hostname: str = DEFAULT_PROXY_HOSTNAME
    proxy_protocol: str = DEFAULT_PROXY_PROTOCOL
    pathname_regex: str = ""
    ua_whitelist: str = ""
    ua_blacklist: str = ""
    ip_whitelist: str = ""
    ip_blacklist: str = ""
    redirect_url: str = ""
    debug: bool = False


def load_proxy_config(environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """Build a ProxyConfig from an environment mapping (defaults to os.environ).

    A variable that is set but empty stays empty: an empty PROXY_HOSTNAME is
    how an operator switches the default upstream off.
    """
    env = os.environ if environ is None else environ
    return ProxyConfig(
        proxy_hostname=env.get("PROXY_HOSTNAME", DEFAULT_PROXY_HOSTNAME),
        proxy_protocol=env.get("PROXY_PROTOCOL", DEFAULT_PROXY_PROTOCOL),
        pathname_regex=env.get("PATHNAME_REGEX", ""),
        ua_whitelist=env.get("UA_WHITELIST_REGEX", ""),
        ua_blacklist=env.get("UA_BLACKLIST_REGEX", ""),
        ip_whitelist=env.get("IP_WHITELIST_REGEX", ""),
        ip_blacklist=env.get("IP_BLACKLIST_REGEX", ""),
        redirect_url=env.get("URL302", ""),
        debug=env.get("DEBUG", "false") == "true",
    )


def get_proxy_config() -> ProxyConfig:
    """FastAPI dependency returning the configuration for the current request."""
    return load_proxy_config()
