"""Ranking of test tags, the first bracketed word of a test name."""

from __future__ import annotations

import re
from collections.abc import Iterable

# The tag is the content of the first bracket of a test name,
# e.g. 'sig-provider' in '[sig-provider] test name'.
_TAG_RE = re.compile(r"^\[([a-zA-Z0-9-]*)\]")

TOTAL_KEY = "total"


def calc_perc_str(num: int, den: int) -> str:
    """Render ``num`` followed by its percentage of ``den``, e.g. ``5 (33.33%)``."""
    if den == 0:
        if num == 0:
            percentage = "NaN"
        else:
            percentage = "+Inf" if num > 0 else "-Inf"
    else:
        percentage = f"{num / den * 100:.2f}"
    return f"{num} ({percentage}%)"


class TestTags(dict[str, int]):
    """Counter of tests by tag, with the number of tests seen under ``total``."""

    __test__ = False

    def __init__(self, tests: Iterable[str] = ()) -> None:
        super().__init__()
        self[TOTAL_KEY] = 0
        for test in tests:
            self.add(test)

    def add(self, test: str) -> None:
        """Count the tag of ``test`` (when it has one) and the test itself."""
        match = _TAG_RE.match(test)
        if match:
            tag = match.group(1)
            self[tag] = self.get(tag, 0) + 1
        self[TOTAL_KEY] += 1

    def ranked(self) -> list[tuple[str, int]]:
        """Return the (tag, count) pairs ordered from the highest count."""
        return sorted(self.items(), key=lambda pair: pair[1], reverse=True)

    def show_sorted(self) -> str:
        """Render the ranking of tags with their share of the total."""
        total = self[TOTAL_KEY]
        message = ""
        for key, value in self.ranked():
            if key == TOTAL_KEY:
                message = f"[{key}={value}]"
                continue
            message = f"{message} [{key}={calc_perc_str(value, total)}]"
        return message