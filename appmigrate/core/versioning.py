"""Numeric comparison of dotted framework version strings."""

from __future__ import annotations

import re

__all__ = ["version_key", "compare_versions", "same_version"]

_NUMERIC_RE = re.compile(r"\d+")


def version_key(version: str) -> tuple[int, ...]:
    """Return a sortable key; trailing zero components are dropped so ``8.0 == 8.0.0``."""
    core = version.strip().split("-", 1)[0].split("+", 1)[0]
    parts = [int(m.group()) if (m := _NUMERIC_RE.match(p)) else 0 for p in core.split(".")]
    while parts and parts[-1] == 0:
        parts.pop()
    return tuple(parts)


def compare_versions(left: str, right: str) -> int:
    a, b = version_key(left), version_key(right)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def same_version(left: str, right: str) -> bool:
    return version_key(left) == version_key(right)
