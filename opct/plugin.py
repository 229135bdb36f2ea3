"""Plugin result summaries and the test items they hold."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from opct.errorcounter import COMMON_ERROR_PATTERNS, ErrorCounter
from opct.testdoc import TestDocumentation

PLUGIN_NAME_OPENSHIFT_UPGRADE = "05-openshift-cluster-upgrade"
PLUGIN_NAME_KUBERNETES_CONFORMANCE = "10-openshift-kube-conformance"
PLUGIN_NAME_OPENSHIFT_CONFORMANCE = "20-openshift-conformance-validated"
PLUGIN_NAME_CONFORMANCE_REPLAY = "80-openshift-tests-replay"
PLUGIN_NAME_ARTIFACTS_COLLECTOR = "99-openshift-artifacts-collector"

# Plugin names used prior to v0.2, kept for compatibility.
PLUGIN_OLD_NAME_KUBERNETES_CONFORMANCE = "openshift-kube-conformance"
PLUGIN_OLD_NAME_OPENSHIFT_CONFORMANCE = "openshift-conformance-validated"

# Filter that keeps only failures of tests included in the suite.
FILTER_NAME_SUITE_ONLY = "suite-only"
# Filter that excludes known failures.
FILTER_NAME_KF = "known-failures"
# Filter that excludes failures found in the baseline archive.
FILTER_NAME_BASELINE = "baseline"
# Filter that excludes flaky tests.
FILTER_NAME_FLAKY = "flaky"
# Filter that excludes failures passing in the replay step.
FILTER_NAME_REPLAY = "replay"
# Last step of the pipeline, copying the final list of failures.
FILTER_NAME_FINAL_COPY = "copy"

_CONFORMANCE_TAG = "[Conformance]"


@dataclass
class PluginDefinition:
    """Images and name of a plugin."""

    plugin_image: str = ""
    sonobuoy_image: str = ""
    name: str = ""


@dataclass
class TestItem:
    """A single test result handled by the processing pipeline."""

    __test__ = False

    name: str = ""
    id: str = ""
    status: str = ""
    state: str = ""
    failure: str = ""
    system_out: str = ""
    offset: int = 0
    flake: Any = None
    error_counters: ErrorCounter | None = None
    documentation: str = ""

    def update_error_counter(self) -> None:
        """Count error patterns in the failure and stdout of the test."""
        counters: ErrorCounter = {}
        total = 0
        for pattern in COMMON_ERROR_PATTERNS:
            regex = re.compile(pattern)
            for text in (self.failure, self.system_out):
                count = sum(1 for _ in regex.finditer(text))
                if count:
                    counters[pattern] = counters.get(pattern, 0) + count
                    total += count
        if total == 0:
            return
        counters["total"] = total
        self.error_counters = counters

    def lookup_documentation(self, doc: TestDocumentation) -> None:
        """Link the test to its documentation section, or to the base page."""
        # Labels appended after '[Conformance]' are removed to recover the upstream name.
        name_index = self.name.split(_CONFORMANCE_TAG)[0] + _CONFORMANCE_TAG
        item = doc.tests.get(name_index)
        if item is not None:
            self.documentation = item.url_fragment
            return
        self.documentation = doc.user_base_url


@dataclass
class PluginSummary:
    """Results of one plugin and its failures through each filter."""

    name: str = ""
    name_alias: str = ""
    status: str = ""
    total: int = 0
    passed: int = 0
    failed: int = 0
    timeout: int = 0
    skipped: int = 0
    documentation: TestDocumentation | None = None
    definition: PluginDefinition | None = None
    error_counters: ErrorCounter | None = None
    tests: dict[str, TestItem] = field(default_factory=dict)
    failed_list: list[str] = field(default_factory=list)
    failed_filtered: list[str] = field(default_factory=list)
    # suite only
    failed_filter1: list[str] = field(default_factory=list)
    failed_excluded_filter1: list[str] = field(default_factory=list)
    # baseline archive
    failed_filter2: list[str] = field(default_factory=list)
    failed_excluded_filter2: list[str] = field(default_factory=list)
    # flake API
    failed_filter3: list[str] = field(default_factory=list)
    failed_excluded_filter3: list[str] = field(default_factory=list)
    # baseline API
    failed_filter4: list[str] = field(default_factory=list)
    failed_excluded_filter4: list[str] = field(default_factory=list)
    # known failures
    failed_filter5: list[str] = field(default_factory=list)
    failed_excluded_filter5: list[str] = field(default_factory=list)
    # replay
    failed_filter6: list[str] = field(default_factory=list)
    failed_excluded_filter6: list[str] = field(default_factory=list)

    _FILTER_SLOTS = {
        FILTER_NAME_SUITE_ONLY: 1,
        FILTER_NAME_BASELINE: 2,
        FILTER_NAME_KF: 5,
        FILTER_NAME_REPLAY: 6,
    }
    _PREVIOUS_SLOT = {
        FILTER_NAME_KF: 1,
        FILTER_NAME_REPLAY: 5,
        FILTER_NAME_BASELINE: 6,
        FILTER_NAME_FINAL_COPY: 4,
    }

    def get_error_counters(self) -> ErrorCounter:
        """Accumulate the error counters of every test into the plugin counters."""
        if self.error_counters is None:
            self.error_counters = {}
        for test in self.tests.values():
            if not test.error_counters:
                continue
            for key, value in test.error_counters.items():
                self.error_counters[key] = self.error_counters.get(key, 0) + value
        return self.error_counters

    def get_failures_by_filter_id(self, filter_id: str) -> tuple[list[str], list[str]]:
        """Return the (kept, excluded) failure lists of a filter."""
        slot = self._FILTER_SLOTS.get(filter_id)
        if slot is None:
            return [], []
        return (
            getattr(self, f"failed_filter{slot}"),
            getattr(self, f"failed_excluded_filter{slot}"),
        )

    def set_failures_by_filter_id(
        self, filter_id: str, failures: list[str], excluded: list[str]
    ) -> None:
        """Store the (kept, excluded) failure lists of a filter."""
        slot = self._FILTER_SLOTS.get(filter_id)
        if slot is None:
            return
        setattr(self, f"failed_filter{slot}", failures)
        setattr(self, f"failed_excluded_filter{slot}", excluded)

    def get_previous_failures_by_filter_id(self, filter_id: str) -> list[str]:
        """Return the failures produced by the step before ``filter_id``."""
        slot = self._PREVIOUS_SLOT.get(filter_id)
        if slot is None:
            return []
        return getattr(self, f"failed_filter{slot}")