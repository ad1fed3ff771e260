"""
Hostname substitution shared by both proxy directions.

A hostname is only replaced where it stands as a whole token that is not the
tail of a longer dotted name, so ``registry-1.docker.io`` is rewritten but
``cdn.registry-1.docker.io`` is left alone.
Word boundaries are ASCII-only, so a neighbouring non-ASCII letter does not
glue onto the hostname.
"""

import re
from functools import lru_cache
from typing import Pattern


@lru_cache(maxsize=256)
def _host_pattern(host: str) -> Pattern[str]:
    return re.compile(rf"(?<!\.)\b{re.escape(host)}\b", re.ASCII)


@lru_cache(maxsize=256)
def _host_with_suffix_pattern(host: str, path_pattern: str) -> Pattern[str]:
    return re.compile(rf"(?<!\.)\b{re.escape(host)}\b({path_pattern})", re.ASCII)


def rewrite(text: str, from_host: str, to_host: str) -> str:
    """Replace every standalone, non-dot-prefixed ``from_host`` with ``to_host``."""
    if not text or not from_host or from_host == to_host:
        return text
    return _host_pattern(from_host).sub(lambda _m: to_host, text)


def rewrite_with_path_suffix(
    text: str, from_host: str, path_pattern: str, to_host: str
) -> str:
    """
    Like :func:`rewrite`, but only where the hostname is immediately followed
    by a match of ``path_pattern``. The matched suffix is kept as-is.
    """
    if not text or not from_host or from_host == to_host:
        return text
    pattern = _host_with_suffix_pattern(from_host, path_pattern)
    return pattern.sub(lambda m: to_host + m.group(1), text)
