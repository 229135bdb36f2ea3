"""Filters of the failure pipeline applied to each plugin summary.

Each filter reads the failures kept by the step before it, marks the tests it
handled and stores the kept (sorted) and excluded failures in its own slot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from opct.plugin import (
    FILTER_NAME_BASELINE,
    FILTER_NAME_FINAL_COPY,
    FILTER_NAME_KF,
    FILTER_NAME_REPLAY,
    PLUGIN_NAME_CONFORMANCE_REPLAY,
    PLUGIN_NAME_KUBERNETES_CONFORMANCE,
    PLUGIN_NAME_OPENSHIFT_CONFORMANCE,
    PLUGIN_NAME_OPENSHIFT_UPGRADE,
    PluginSummary,
)

logger = logging.getLogger(__name__)

_PIPELINE_PLUGINS = frozenset(
    {
        PLUGIN_NAME_OPENSHIFT_UPGRADE,
        PLUGIN_NAME_KUBERNETES_CONFORMANCE,
        PLUGIN_NAME_OPENSHIFT_CONFORMANCE,
    }
)


def _mark(summary: PluginSummary, name: str, state: str) -> None:
    test = summary.tests.get(name)
    if test is not None:
        test.state = state


def _split(
    summary: PluginSummary,
    filter_id: str,
    state: str,
    excluded_names: Iterable[str] | set[str],
) -> tuple[list[str], list[str], int]:
    """Split the previous step's failures into kept and excluded ones."""
    excluded_set = set(excluded_names)
    kept, excluded = summary.get_failures_by_filter_id(filter_id)
    kept, excluded = list(kept), list(excluded)
    previous = summary.get_previous_failures_by_filter_id(filter_id)
    for name in previous:
        _mark(summary, name, state)
        if name in excluded_set:
            excluded.append(name)
        else:
            kept.append(name)
    kept.sort()
    summary.set_failures_by_filter_id(filter_id, kept, excluded)
    return kept, excluded, len(previous)


def apply_filter_suite(summary: PluginSummary, suite_tests: Iterable[str]) -> None:
    """Keep the failures of tests included in the suite; all of them when it is empty."""
    suite = set(suite_tests)
    for name in summary.failed_list:
        _mark(summary, name, "filter1SuiteOnly")
        if not suite or name in suite:
            summary.failed_filter1.append(name)
        else:
            summary.failed_excluded_filter1.append(name)
    summary.failed_filter1.sort()
    logger.debug(
        "Filter (SuiteOnly) results: plugin=%s in=failures(%d) in=suite(%d) "
        "out=filter(%d) filterExcluded(%d)",
        summary.name,
        len(summary.failed_list),
        len(suite),
        len(summary.failed_filter1),
        len(summary.failed_excluded_filter1),
    )


def apply_filter_known_failures(summary: PluginSummary, known_failures: Iterable[str]) -> None:
    """Exclude well known failures that are not relevant to the validation."""
    kept, excluded, count = _split(
        summary, FILTER_NAME_KF, "filter5KnownFailures", known_failures
    )
    logger.debug(
        "Filter (KF) results: plugin=%s in=filter(%d) out=filter(%d) filterExcluded(%d)",
        summary.name,
        count,
        len(kept),
        len(excluded),
    )


def apply_filter_replay(summary: PluginSummary, replay: PluginSummary | None) -> None:
    """Exclude failures whose test passed in the replay step."""
    if replay is None:
        kept, excluded = summary.get_failures_by_filter_id(FILTER_NAME_REPLAY)
        summary.set_failures_by_filter_id(FILTER_NAME_REPLAY, kept, excluded)
        logger.debug("skipping filter (Replay) for plugin: %s, no replay results", summary.name)
        return

    passed = {test.name for test in replay.tests.values() if test.status == "passed"}
    failed = {test.name for test in replay.tests.values() if test.status != "passed"}
    kept, excluded, count = _split(summary, FILTER_NAME_REPLAY, "filter6Replay", passed)
    logger.debug(
        "Filter (Replay) results: plugin=%s in=filter(%d) replay=pass(%d) fail(%d) "
        "out=filter(%d) filterExcluded(%d)",
        summary.name,
        count,
        len(passed),
        len(failed),
        len(kept),
        len(excluded),
    )


def apply_filter_baseline(summary: PluginSummary, baseline_failures: Iterable[str]) -> None:
    """Exclude failures also found in the baseline archive."""
    baseline = set(baseline_failures)
    if baseline:
        logger.warning(
            "Filter baseline (--diff|--baseline) is deprecated and will be removed soon, "
            "the filter BaselineAPI is replacing and automatically applied to the "
            "failure pipeline."
        )
    kept, excluded, count = _split(summary, FILTER_NAME_BASELINE, "filter2Baseline", baseline)
    logger.debug(
        "Filter (Baseline) results: plugin=%s in=filter(%d) out=filter(%d) filterExcluded(%d)",
        summary.name,
        count,
        len(kept),
        len(excluded),
    )


def apply_filter_baseline_api(
    summary: PluginSummary, baseline_failures: Iterable[str], skip: bool
) -> None:
    """Exclude failures known from the baseline API.

    When ``skip`` is true the failures of the previous step are kept unchanged.
    """
    baseline = set(baseline_failures)
    for name in summary.failed_filter3:
        _mark(summary, name, "filter4BaselineAPI")
        if name in baseline:
            summary.failed_excluded_filter4.append(name)
        else:
            summary.failed_filter4.append(name)

    if skip:
        logger.warning(
            "Filter pipeline: Baseline API is explicitly disabled, "
            "using Filter3 to keep processing failures"
        )
        summary.failed_filter4 = list(summary.failed_filter3)
    summary.failed_filter4.sort()
    logger.debug(
        "Filter (BaselineAPI) results: plugin=%s in=filter(%d) inApi=(%d) "
        "out=filter(%d) excluded(%d)",
        summary.name,
        len(summary.failed_filter3),
        len(baseline),
        len(summary.failed_filter4),
        len(summary.failed_excluded_filter4),
    )


def apply_filter_copy(summary: PluginSummary, plugin_name: str) -> None:
    """Store the output of the last filter as the final list of failures."""
    if plugin_name == PLUGIN_NAME_CONFORMANCE_REPLAY:
        summary.failed_filtered = summary.failed_list
    elif plugin_name in _PIPELINE_PLUGINS:
        summary.failed_filtered = summary.get_previous_failures_by_filter_id(
            FILTER_NAME_FINAL_COPY
        )
    else:
        raise ValueError(f"invalid plugin: {plugin_name}")
    logger.debug(
        "Filter results (Final): plugin=%s filtered failures(%d)",
        plugin_name,
        len(summary.failed_filtered),
    )