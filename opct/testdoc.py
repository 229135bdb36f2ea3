"""Index of the upstream conformance documentation, used to link failed tests."""

from __future__ import annotations

import logging
import re
import urllib.error
import urllib.request
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_APP = "Test Documentation"
_DEFINED_PREFIX = "- Defined in code as: "
_DEFINED_MARKER = "Defined in code as: "
_SECTION_RE = re.compile(r"^## \[(.*)\]")
_FRAGMENT_DROP = (":", "-", ".", ",", "=")


class DocumentationError(Exception):
    """Raised when the documentation cannot be fetched or indexed."""


@dataclass
class TestDocumentationItem:
    """A documented test: its section title, name and link to the section."""

    __test__ = False

    title: str = ""
    name: str = ""
    url_fragment: str = ""


@dataclass
class TestDocumentation:
    """Documentation page for a suite, indexed by test name."""

    __test__ = False

    user_base_url: str
    source_base_url: str
    raw: str | None = None
    tests: dict[str, TestDocumentationItem] = field(default_factory=dict)

    def load(self) -> None:
        """Fetch the raw documentation from ``source_base_url``."""
        try:
            request = urllib.request.Request(self.source_base_url, method="GET")
        except ValueError as exc:
            raise DocumentationError(f"failed to create request to get {_APP}: {exc}") from exc
        try:
            with urllib.request.urlopen(request) as response:
                if response.status != 200:
                    raise DocumentationError(f"unexpected HTTP status code to {_APP}")
                try:
                    body = response.read()
                except OSError as exc:
                    raise DocumentationError(
                        f"failed to read response body for {_APP}: {exc}"
                    ) from exc
        except urllib.error.HTTPError as exc:
            raise DocumentationError(f"unexpected HTTP status code to {_APP}") from exc
        except (urllib.error.URLError, ValueError, OSError) as exc:
            raise DocumentationError(f"failed to make request to {_APP}: {exc}") from exc
        self.raw = body.decode("utf-8", errors="replace")

    def build_index(self) -> None:
        """Index the tests defined in the raw page, with their URL fragments."""
        if self.raw is None:
            raise DocumentationError("documentation is not loaded")
        lines = self.raw.split("\n")
        self.tests = {}
        for number, line in enumerate(lines):
            if not line.startswith(_DEFINED_PREFIX):
                continue
            test_name = line.split(_DEFINED_MARKER)[1]
            if number < 3:
                raise DocumentationError(
                    f"unable to build documentation index for line: {line}"
                )
            # The section title sits three lines before the name definition.
            title = lines[number - 3]
            item = TestDocumentationItem(name=test_name, title=title)
            self.tests[test_name] = item

            match = _SECTION_RE.match(title)
            if match:
                fragment = match.group(1)
                for symbol in _FRAGMENT_DROP:
                    fragment = fragment.replace(symbol, "")
                fragment = fragment.replace(" ", "-").lower()
                item.url_fragment = f"{self.user_base_url}#{fragment}"