"""
Whitelist/blacklist evaluation for inbound requests.

Patterns are operator supplied, so a broken one raises ``re.error`` straight
out of :func:`evaluate` instead of being swallowed here.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Pattern

from hubproxy.config import ProxyConfig
from hubproxy.proxy.models import RequestInfo, UpstreamTarget


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOW = AccessDecision(allowed=True)


@lru_cache(maxsize=128)
def compile_policy(pattern: str) -> Pattern[str]:
    return re.compile(pattern)


def _matches(pattern: str, value: str) -> bool:
    return compile_policy(pattern).search(value) is not None


def evaluate(
    info: RequestInfo, target: UpstreamTarget, config: ProxyConfig
) -> AccessDecision:
    """Return the first failing policy as a deny decision, or ALLOW."""
    if not target.hostname:
        return AccessDecision(False, "no upstream hostname")
    if config.pathname_regex and not _matches(config.pathname_regex, info.path):
        return AccessDecision(False, "path not allowed")

    user_agent = info.user_agent.lower()
    if config.ua_whitelist and not _matches(config.ua_whitelist, user_agent):
        return AccessDecision(False, "user agent not whitelisted")
    if config.ua_blacklist and _matches(config.ua_blacklist, user_agent):
        return AccessDecision(False, "user agent blacklisted")

    if config.ip_whitelist and not _matches(config.ip_whitelist, info.client_ip):
        return AccessDecision(False, "client ip not whitelisted")
    if config.ip_blacklist and _matches(config.ip_blacklist, info.client_ip):
        return AccessDecision(False, "client ip blacklisted")

    return ALLOW
