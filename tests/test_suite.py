from opct.suite import OpenshiftTestsSuite, OpenshiftTestsSuites


def test_load_strips_quotes_and_blank_lines():
    suite = OpenshiftTestsSuite(name="s")
    suite.load("tests.txt", '"[sig-a] one"\n\n"[sig-b] two"\n')
    assert suite.tests == ["[sig-a] one", "[sig-b] two"]
    assert suite.count == len(suite.tests)
    assert suite.input_file == "tests.txt"


def test_load_accepts_bytes():
    suite = OpenshiftTestsSuite()
    suite.load("f", b"a\nb\nc")
    assert suite.tests == ["a", "b", "c"]
    assert suite.count == 3


def test_load_empty_replaces_previous():
    suite = OpenshiftTestsSuite()
    suite.load("f", "x\ny")
    suite.load("g", "")
    assert suite.tests == []
    assert suite.count == 0
    assert suite.input_file == "g"


def test_suites_totals():
    suites = OpenshiftTestsSuites()
    suites.kubernetes_conformance.load("k", "a\nb")
    suites.openshift_conformance.load("o", "c")
    assert suites.total_k8s() == 2
    assert suites.total_ocp() == 1
    assert suites.kubernetes_conformance.name == "kubernetesConformance"
    assert suites.openshift_conformance.name == "openshiftConformance"