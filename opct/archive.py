"""Parsers for runtime information stored inside result archives."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)

PLUGIN_NAME_UPGRADE = "05-openshift-cluster-upgrade"
PLUGIN_NAME_KUBE_CONFORMANCE = "10-openshift-kube-conformance"
PLUGIN_NAME_OPENSHIFT_CONFORMANCE = "20-openshift-conformance-validated"
PLUGIN_NAME_REPLAY = "80-openshift-tests-replay"
PLUGIN_NAME_ARTIFACTS_COLLECTOR = "99-openshift-artifacts-collector"

# Plugin whose finish time is the reference for the delta of each plugin.
_PREDECESSOR = {
    PLUGIN_NAME_KUBE_CONFORMANCE: PLUGIN_NAME_UPGRADE,
    PLUGIN_NAME_OPENSHIFT_CONFORMANCE: PLUGIN_NAME_KUBE_CONFORMANCE,
    PLUGIN_NAME_REPLAY: PLUGIN_NAME_OPENSHIFT_CONFORMANCE,
    PLUGIN_NAME_ARTIFACTS_COLLECTOR: PLUGIN_NAME_REPLAY,
}

_OPCT_CONFIG_MAPS = frozenset(
    {"openshift-provider-certification-version", "opct-version", "plugins-config"}
)

_DATE_RE = re.compile(
    r"([0-9]{4})/([0-9]{2})/([0-9]{2}) ([0-9]{2}):([0-9]{2}):([0-9]{2})(?:[.,]([0-9]+))?"
)
_ZERO_TIME = datetime(1, 1, 1)
_MAX_DURATION_NS = 2**63 - 1
_MIN_DURATION_NS = -(2**63)
_NS_PER_SECOND = 10**9


@dataclass
class RuntimeInfoItem:
    """A named piece of runtime information extracted from an archive."""

    name: str
    value: str = ""
    config: str = ""
    time: str = ""
    total: str = ""
    delta: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serializable form; optional fields are left out when empty."""
        data = {"name": self.name, "value": self.value}
        for key in ("config", "time", "total", "delta"):
            field_value = getattr(self, key)
            if field_value:
                data[key] = field_value
        return data


@dataclass
class MetaLogItem:
    """One entry of the aggregator meta log (meta/run.log)."""

    level: str = ""
    message: str = ""
    time: str = ""
    plugin: str = ""
    method: str = ""
    plugin_name: str = ""

    _JSON_FIELDS = {
        "level": "level",
        "msg": "message",
        "time": "time",
        "plugin": "plugin",
        "method": "method",
        "plugin_name": "plugin_name",
    }

    @classmethod
    def from_json(cls, line: str) -> MetaLogItem:
        """Decode one JSON log line; raises ValueError when it is not valid."""
        data = json.loads(line)
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"log entry is not an object: {line!r}")
        values: dict[str, str] = {}
        for json_key, attribute in cls._JSON_FIELDS.items():
            raw = data.get(json_key)
            if raw is None:
                continue
            if not isinstance(raw, str):
                raise ValueError(f"field {json_key!r} is not a string: {raw!r}")
            values[attribute] = raw
        return cls(**values)


def parse_meta_config(cfg: Mapping[str, Any]) -> list[RuntimeInfoItem]:
    """Extract the relevant attributes of the meta/config.json contents."""

    def text(key: str) -> str:
        value = cfg.get(key)
        return "" if value is None else str(value)

    return [
        # General server
        RuntimeInfoItem(name="UUID", value=text("UUID")),
        RuntimeInfoItem(name="Version", value=text("Version")),
        RuntimeInfoItem(name="ResultsDir", value=text("ResultsDir")),
        RuntimeInfoItem(name="Namespace", value=text("Namespace")),
        # Plugins
        RuntimeInfoItem(name="WorkerImage", value=text("WorkerImage")),
        RuntimeInfoItem(name="ImagePullPolicy", value=text("ImagePullPolicy")),
        # Security
        RuntimeInfoItem(name="AggregatorPermissions", value=text("AggregatorPermissions")),
        RuntimeInfoItem(name="ServiceAccountName", value=text("ServiceAccountName")),
        RuntimeInfoItem(
            name="ExistingServiceAccount",
            value="yes" if cfg.get("ExistingServiceAccount") else "no",
        ),
        RuntimeInfoItem(name="SecurityContextMode", value=text("SecurityContextMode")),
    ]


def _parse_meta_time(value: str) -> tuple[datetime, int]:
    """Parse an ISO8601-like timestamp into (whole-second datetime, nanoseconds).

    Unparseable values yield the zero time.
    """
    text = value.replace("-", "/").replace("T", " ").replace("Z", "")
    match = _DATE_RE.fullmatch(text)
    if match:
        try:
            moment = datetime(*(int(group) for group in match.groups()[:6]))
        except ValueError:
            pass
        else:
            fraction = match.group(7) or ""
            nanos = int(fraction[:9].ljust(9, "0")) if fraction else 0
            return moment, nanos
    logger.debug("[parser] couldn't parse date: %r", value)
    return _ZERO_TIME, 0


def _format_fraction(value: int, precision: int) -> str:
    whole, rest = divmod(value, 10**precision)
    digits = f"{rest:0{precision}d}".rstrip("0")
    return f"{whole}.{digits}" if digits else str(whole)


def _format_duration(nanos: int) -> str:
    """Render a nanosecond duration such as ``1h20m0s`` or ``250ms``."""
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    amount = abs(nanos)
    if amount < _NS_PER_SECOND:
        if amount < 1_000:
            return f"{sign}{amount}ns"
        if amount < 1_000_000:
            return f"{sign}{_format_fraction(amount, 3)}µs"
        return f"{sign}{_format_fraction(amount, 6)}ms"

    seconds, fraction = divmod(amount, _NS_PER_SECOND)
    minutes, secs = divmod(seconds, 60)
    hours, mins = divmod(minutes, 60)
    text = _format_fraction(secs * _NS_PER_SECOND + fraction, 9) + "s"
    if minutes:
        text = f"{mins}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def _diff_date(start: str, end: str) -> str:
    start_moment, start_nanos = _parse_meta_time(start)
    end_moment, end_nanos = _parse_meta_time(end)
    delta = end_moment - start_moment
    nanos = (delta.days * 86_400 + delta.seconds) * _NS_PER_SECOND
    nanos += delta.microseconds * 1_000 + end_nanos - start_nanos
    nanos = max(_MIN_DURATION_NS, min(_MAX_DURATION_NS, nanos))
    return _format_duration(nanos)


def parse_meta_logs(logs: Iterable[str]) -> list[RuntimeInfoItem]:
    """Build the runtime timeline (server and plugin markers) from meta/run.log lines."""
    server_started_at = ""
    timeline: list[RuntimeInfoItem] = []
    seen: set[str] = set()
    plugin_started_at: dict[str, str] = {}
    plugin_finished_at: dict[str, str] = {}

    for line in logs:
        try:
            entry = MetaLogItem.from_json(line)
        except ValueError as exc:
            logger.debug("[parser] couldn't parse item in meta/run.log: %s", exc)
            continue

        if entry.message.startswith("Starting server Expected Results"):
            timeline.append(RuntimeInfoItem(name="server started", time=entry.time))
            server_started_at = entry.time

        # plugin started (healthy): only the first request counts
        if entry.method == "POST" and entry.message == "received request":
            if entry.plugin_name in seen:
                continue
            seen.add(entry.plugin_name)
            timeline.append(
                RuntimeInfoItem(name=f"plugin started {entry.plugin_name}", time=entry.time)
            )
            plugin_started_at[entry.plugin_name] = entry.time

        # plugin finished
        if entry.method == "PUT":
            name = entry.plugin_name
            plugin_finished_at[name] = entry.time
            if name == PLUGIN_NAME_UPGRADE:
                delta = _diff_date(plugin_started_at.get(name, ""), entry.time)
            elif name in _PREDECESSOR:
                delta = _diff_date(plugin_finished_at.get(_PREDECESSOR[name], ""), entry.time)
            else:
                delta = ""
            timeline.append(
                RuntimeInfoItem(
                    name=f"plugin finished {name}",
                    time=entry.time,
                    total=_diff_date(plugin_started_at.get(name, ""), entry.time),
                    delta=delta,
                )
            )

        # plugin cleanup marks the end of the server
        if entry.message == "Invoking plugin cleanup":
            marker = "server finished"
            if marker not in seen:
                timeline.append(
                    RuntimeInfoItem(
                        name=marker,
                        time=entry.time,
                        total=_diff_date(server_started_at, entry.time),
                    )
                )
            seen.add(marker)

    return timeline


def parse_opct_config(cms: Mapping[str, Any] | None) -> list[RuntimeInfoItem]:
    """Extract runtime settings from the config map list sent to the plugins.

    ``cms`` is a decoded ConfigMapList; items are ordered by config map and key.
    """
    if cms is None:
        logger.debug("unable to read OPCT config map: ConfigMapList not found")
        return []
    items = cms.get("items") or []
    if not items:
        logger.debug("unable to read OPCT config map: ConfigMapList is empty")
        return []

    by_key: dict[str, RuntimeInfoItem] = {}
    keys: list[str] = []
    for config_map in items:
        name = (config_map.get("metadata") or {}).get("name", "")
        if name not in _OPCT_CONFIG_MAPS:
            continue
        for key, value in (config_map.get("data") or {}).items():
            index = f"{name}_{key}"
            by_key[index] = RuntimeInfoItem(name=key, value=value, config=name)
            keys.append(index)

    return [by_key[key] for key in sorted(keys)]