"""Summary of the Sonobuoy metadata collected in a result archive."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from opct.archive import (
    RuntimeInfoItem,
    parse_meta_config,
    parse_meta_logs,
    parse_opct_config,
)


@dataclass
class SonobuoyPluginDefinition:
    """Definition manifest of a Sonobuoy plugin and the aggregator image."""

    definition: dict[str, Any] | None = None
    sonobuoy_image: str = ""


@dataclass
class SonobuoySummary:
    """Cluster summary, runtime information and plugin definitions from Sonobuoy."""

    cluster: dict[str, Any] | None = None
    meta_runtime: list[RuntimeInfoItem] = field(default_factory=list)
    meta_config: list[RuntimeInfoItem] = field(default_factory=list)
    opct_config: list[RuntimeInfoItem] = field(default_factory=list)
    plugins_definition: dict[str, SonobuoyPluginDefinition] = field(default_factory=dict)

    def set_cluster(self, cluster: dict[str, Any] | None) -> None:
        """Keep the cluster health summary."""
        self.cluster = cluster

    def set_plugins_definition(
        self, definitions: Mapping[str, SonobuoyPluginDefinition]
    ) -> None:
        """Replace all plugin definitions."""
        self.plugins_definition = dict(definitions)

    def set_plugin_definition(self, name: str, definition: SonobuoyPluginDefinition) -> None:
        """Store the definition of one plugin."""
        self.plugins_definition[name] = definition

    def parse_meta_runlogs(self, log_text: str | bytes) -> None:
        """Build the runtime timeline from the contents of meta/run.log."""
        if isinstance(log_text, bytes):
            log_text = log_text.decode("utf-8", errors="replace")
        self.meta_runtime = parse_meta_logs(log_text.split("\n"))

    def parse_meta_config(self, meta_config: Mapping[str, Any]) -> None:
        """Extract runtime settings from the contents of meta/config.json."""
        self.meta_config = parse_meta_config(meta_config)

    def parse_opct_config_map(self, cms: Mapping[str, Any] | None) -> None:
        """Extract runtime settings from the OPCT config map list."""
        self.opct_config = parse_opct_config(cms)