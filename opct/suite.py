"""Lists of tests included in the conformance suites."""

from __future__ import annotations

from dataclasses import dataclass, field

SUITE_NAME_KUBERNETES_CONFORMANCE = "kubernetes/conformance"
SUITE_NAME_OPENSHIFT_CONFORMANCE = "openshift/conformance"


@dataclass
class OpenshiftTestsSuite:
    """A suite and the names of the tests it runs."""

    name: str = ""
    input_file: str = ""
    count: int = 0
    tests: list[str] = field(default_factory=list)

    def load(self, input_file: str, data: str | bytes) -> None:
        """Load one test name per line, dropping blank lines and surrounding quotes."""
        text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
        self.input_file = input_file
        self.tests = [line.strip('"') for line in text.split("\n") if line]
        self.count = len(self.tests)


@dataclass
class OpenshiftTestsSuites:
    """The Kubernetes and OpenShift conformance suites."""

    kubernetes_conformance: OpenshiftTestsSuite = field(
        default_factory=lambda: OpenshiftTestsSuite(name="kubernetesConformance")
    )
    openshift_conformance: OpenshiftTestsSuite = field(
        default_factory=lambda: OpenshiftTestsSuite(name="openshiftConformance")
    )

    def total_ocp(self) -> int:
        return self.openshift_conformance.count

    def total_k8s(self) -> int:
        return self.kubernetes_conformance.count