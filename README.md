# opct

Building blocks for reviewing the results of an OpenShift/OKD provider
compatibility run: counting error patterns in logs, reading the metadata the
conformance aggregator writes into its result archive, redacting known secrets
from such an archive, and narrowing the list of failed tests of each plugin
down through a pipeline of filters.

The package has no runtime dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## What is in it

| Module | Purpose |
| --- | --- |
| `opct.errorcounter` | `new_error_counter` counts the matches of regular expressions (plus `error`) in a text; `merge_error_counters` sums two counters. `COMMON_ERROR_PATTERNS` holds the usual patterns. |
| `opct.archive` | `parse_meta_config` (contents of `meta/config.json`), `parse_meta_logs` (server and plugin start/finish timings from `meta/run.log` lines), `parse_opct_config` (runtime config maps from a decoded ConfigMapList). They return `RuntimeInfoItem` objects; `MetaLogItem.from_json` decodes one log line. |
| `opct.cleaner` | `scan_patch_tar_gzip` reads a `.tar.gz` stream and returns it re-packed as bytes, nested `.tar.gz` members included, with known secrets replaced by JSON patches (`apply_json_patch`). Failures raise `CleanerError`. |
| `opct.testdoc` | `TestDocumentation` fetches a conformance documentation page (`load`) and indexes test names to section links (`build_index`). Failures raise `DocumentationError`. |
| `opct.plugin` | `PluginSummary` and `TestItem`: per-plugin counters, tests, error counters and the failure lists kept by each filter; plugin and filter name constants. |
| `opct.suite` | `OpenshiftTestsSuite` loads the test names of a suite from a text listing; `OpenshiftTestsSuites` holds the Kubernetes and OpenShift suites. |
| `opct.timers` | `Timers`: named lap timers with an injectable clock. |
| `opct.sonobuoy` | `SonobuoySummary`: cluster summary, plugin definitions and the parsed runtime metadata. |
| `opct.tags` | `TestTags`: count tests by their leading `[tag]` and rank them; `calc_perc_str` formats a count with its percentage. |
| `opct.filters` | The individual filters of the failure pipeline. |

## Examples

Counting error patterns in a log:

```python
from opct.errorcounter import COMMON_ERROR_PATTERNS, merge_error_counters, new_error_counter

counters = new_error_counter(log_text, COMMON_ERROR_PATTERNS)
# None when nothing matched, otherwise a dict keyed by pattern plus "total"

merged = merge_error_counters(counters, other_counters)
```

Ranking tests by tag:

```python
from opct.tags import TestTags

tags = TestTags(["[sig-a] first", "[sig-a] second", "[sig-b] third"])
print(tags.show_sorted())
# [total=3] [sig-a=2 (66.67%)] [sig-b=1 (33.33%)]
```

Redacting secrets from a result archive:

```python
from opct.cleaner import scan_patch_tar_gzip

with open("results.tar.gz", "rb") as stream:
    cleaned = scan_patch_tar_gzip(stream)

with open("results-cleaned.tar.gz", "wb") as out:
    out.write(cleaned)
```

Reading run timings from the aggregator log:

```python
from opct.archive import parse_meta_logs

with open("meta/run.log") as fh:
    for item in parse_meta_logs(fh.read().split("\n")):
        print(item.name, item.time, item.total, item.delta)
```

## The failure filter pipeline

Each `PluginSummary` starts with `failed_list`. The functions of
`opct.filters` each read the failures kept by the step before them, mark the
tests they handled (`TestItem.state`) and store their kept (sorted) and
excluded failures in their own slot:

1. `apply_filter_suite(summary, suite_tests)`: keep failures of tests in the
   suite, or all of them when the suite is empty (`failed_filter1`);
2. `apply_filter_known_failures(summary, known_failures)`: drop the given
   known failures (`failed_filter5`);
3. `apply_filter_replay(summary, replay)`: drop failures whose test passed in
   the replay plugin's results (`failed_filter6`);
4. `apply_filter_baseline(summary, baseline_failures)`: drop failures also
   seen in a baseline run (`failed_filter2`);
5. `apply_filter_baseline_api(summary, baseline_failures, skip)`: drop
   failures known from reference runs, reading `failed_filter3`; with
   `skip=True` the failures pass unchanged (`failed_filter4`);
6. `apply_filter_copy(summary, plugin_name)`: store the result as
   `failed_filtered`.

```python
from opct import filters
from opct.plugin import PluginSummary, TestItem, PLUGIN_NAME_KUBERNETES_CONFORMANCE

summary = PluginSummary(
    name=PLUGIN_NAME_KUBERNETES_CONFORMANCE,
    failed_list=["[sig-a] b", "[sig-a] a"],
    tests={n: TestItem(name=n, status="failed") for n in ("[sig-a] a", "[sig-a] b")},
)
filters.apply_filter_suite(summary, [])
filters.apply_filter_known_failures(summary, ["[sig-a] b"])
filters.apply_filter_replay(summary, None)
filters.apply_filter_baseline(summary, [])
summary.failed_filter3 = list(summary.failed_filter2)
filters.apply_filter_baseline_api(summary, [], skip=False)
filters.apply_filter_copy(summary, PLUGIN_NAME_KUBERNETES_CONFORMANCE)
print(summary.failed_filtered)  # ['[sig-a] a']
```

## What it does not do

- There is no command-line program; everything is used from Python.
- There is no filter for flaky tests: the step between the baseline filter
  and the baseline API filter is left to the caller, who fills
  `failed_filter3` (in the example above, with the baseline filter's output).
- Nothing opens a result archive and runs the whole pipeline over it: the
  caller reads the files of the archive, feeds their contents to the parsers,
  and builds each `PluginSummary`.
- No summary of cluster objects (version, operators, network, nodes) is built,
  and no review files are written to disk; `scan_patch_tar_gzip` returns bytes
  and leaves writing them to the caller.
- Fetching reference results from a remote service is not provided;
  `apply_filter_baseline_api` takes the known failures as an argument.