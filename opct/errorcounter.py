"""Counting of common error patterns found in log buffers."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

ErrorCounter = dict[str, int]

# Common error patterns used to calculate error counters within logs of
# archives (must-gather, conformance execution).
COMMON_ERROR_PATTERNS: tuple[str, ...] = (
    r"Failed to push image",
    r"Failed",
    r"timed out",
    r"'ERROR:'",
    r"ERRO\[",
    r"^error:",
    r"(^FAIL|FAIL: |Failure \[)\b",
    r"panic(\.go)?:",
    r'"level":"error"',
    r"level=error",
    r'level":"fatal"',
    r"level=fatal",
    r"│ Error:",
    r"client connection lost",
)

# Pattern always checked in addition to the ones given by the caller.
GENERIC_ERROR_PATTERN = "error"


def new_error_counter(buf: str, patterns: Iterable[str]) -> ErrorCounter | None:
    """Count the matches of each pattern (plus ``error``) in ``buf``.

    Returns ``None`` when nothing matched, otherwise a mapping from pattern to
    number of matches with the overall sum stored under ``total``.
    """
    counters: ErrorCounter = {}
    total = 0
    for pattern in [*patterns, GENERIC_ERROR_PATTERN]:
        count = sum(1 for _ in re.finditer(pattern, buf))
        if count:
            counters[pattern] = counters.get(pattern, 0) + count
            total += count

    if total == 0:
        return None
    counters["total"] = total
    return counters


def merge_error_counters(
    ec1: Mapping[str, int] | None, ec2: Mapping[str, int] | None
) -> Mapping[str, int]:
    """Merge two counters, summing the values of keys present in both."""
    if ec1 is None:
        return {} if ec2 is None else ec2
    if ec2 is None:
        return ec1
    merged: ErrorCounter = dict(ec1)
    for key, value in ec2.items():
        merged[key] = merged.get(key, 0) + value
    return merged