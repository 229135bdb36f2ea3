import pytest

from opct.archive import (
    MetaLogItem,
    RuntimeInfoItem,
    parse_meta_config,
    parse_meta_logs,
    parse_opct_config,
)

META_CONFIG = {
    "UUID": "00000000-0000-0000-0000-000000000001",
    "Version": "v0.56.10",
    "ResultsDir": "/tmp/sonobuoy/results",
    "Namespace": "openshift-provider-certification",
    "WorkerImage": "quay.io/example/sonobuoy:v0.56.10",
    "ImagePullPolicy": "Always",
    "AggregatorPermissions": "clusterAdmin",
    "ServiceAccountName": "sonobuoy-serviceaccount",
    "ExistingServiceAccount": True,
    "SecurityContextMode": "none",
}


def _log(msg="", time="", method="", plugin_name=""):
    import json

    data = {"msg": msg, "time": time}
    if method:
        data["method"] = method
    if plugin_name:
        data["plugin_name"] = plugin_name
    return json.dumps(data)


def test_runtime_info_item_to_dict_omits_empty_optional_fields():
    item = RuntimeInfoItem(name="UUID", value="")
    assert item.to_dict() == {"name": "UUID", "value": ""}
    full = RuntimeInfoItem(name="n", value="v", config="c", time="t", total="1s", delta="2s")
    assert full.to_dict() == {
        "name": "n",
        "value": "v",
        "config": "c",
        "time": "t",
        "total": "1s",
        "delta": "2s",
    }


def test_meta_log_item_from_json():
    item = MetaLogItem.from_json(
        '{"level":"info","msg":"received request","time":"2023-09-28T00:10:00Z",'
        '"method":"POST","plugin_name":"10-openshift-kube-conformance","extra":1}'
    )
    assert item == MetaLogItem(
        level="info",
        message="received request",
        time="2023-09-28T00:10:00Z",
        method="POST",
        plugin_name="10-openshift-kube-conformance",
    )


@pytest.mark.parametrize("line", ["", "not json", "[1, 2]", '{"msg": 3}'])
def test_meta_log_item_from_json_rejects_invalid(line):
    with pytest.raises(ValueError):
        MetaLogItem.from_json(line)


def test_parse_meta_config():
    assert parse_meta_config(META_CONFIG) == [
        RuntimeInfoItem(name="UUID", value=META_CONFIG["UUID"]),
        RuntimeInfoItem(name="Version", value=META_CONFIG["Version"]),
        RuntimeInfoItem(name="ResultsDir", value=META_CONFIG["ResultsDir"]),
        RuntimeInfoItem(name="Namespace", value=META_CONFIG["Namespace"]),
        RuntimeInfoItem(name="WorkerImage", value=META_CONFIG["WorkerImage"]),
        RuntimeInfoItem(name="ImagePullPolicy", value=META_CONFIG["ImagePullPolicy"]),
        RuntimeInfoItem(name="AggregatorPermissions", value=META_CONFIG["AggregatorPermissions"]),
        RuntimeInfoItem(name="ServiceAccountName", value=META_CONFIG["ServiceAccountName"]),
        RuntimeInfoItem(name="ExistingServiceAccount", value="yes"),
        RuntimeInfoItem(name="SecurityContextMode", value=META_CONFIG["SecurityContextMode"]),
    ]


def test_parse_meta_config_without_existing_service_account():
    items = parse_meta_config({"UUID": "abc"})
    values = {item.name: item.value for item in items}
    assert values["ExistingServiceAccount"] == "no"
    assert values["UUID"] == "abc"
    assert values["Namespace"] == ""


def test_parse_meta_logs_empty():
    assert parse_meta_logs([]) == []


def test_parse_meta_logs_server_start():
    logs = ['{"msg":"Starting server Expected Results: ...","time":"2023-09-28T00:00:00Z"}']
    assert parse_meta_logs(logs) == [
        RuntimeInfoItem(name="server started", time="2023-09-28T00:00:00Z"),
    ]


def test_parse_meta_logs_all():
    logs = [
        _log("Starting server Expected Results: 5", "2023-09-28T00:00:00Z"),
        "",
        "garbage line",
        _log("received request", "2023-09-28T00:10:00Z", "POST", "99-openshift-artifacts-collector"),
        _log("received request", "2023-09-28T00:10:00Z", "POST", "05-openshift-cluster-upgrade"),
        _log("received request", "2023-09-28T00:10:00Z", "POST", "20-openshift-conformance-validated"),
        _log("received request", "2023-09-28T00:10:00Z", "POST", "10-openshift-kube-conformance"),
        _log("received request", "2023-09-28T00:10:00Z", "POST", "80-openshift-tests-replay"),
        _log("received request", "2023-09-28T00:15:00Z", "POST", "10-openshift-kube-conformance"),
        _log("received request", "2023-09-28T00:20:00Z", "PUT", "05-openshift-cluster-upgrade"),
        _log("received request", "2023-09-28T00:30:00Z", "PUT", "10-openshift-kube-conformance"),
        _log("received request", "2023-09-28T01:30:00Z", "PUT", "20-openshift-conformance-validated"),
        _log("received request", "2023-09-28T01:30:00Z", "PUT", "80-openshift-tests-replay"),
        _log("received request", "2023-09-28T02:00:00Z", "PUT", "99-openshift-artifacts-collector"),
        _log("Invoking plugin cleanup", "2023-09-28T02:00:00Z"),
        _log("Invoking plugin cleanup", "2023-09-28T02:05:00Z"),
    ]
    assert parse_meta_logs(logs) == [
        RuntimeInfoItem(name="server started", time="2023-09-28T00:00:00Z"),
        RuntimeInfoItem(name="plugin started 99-openshift-artifacts-collector", time="2023-09-28T00:10:00Z"),
        RuntimeInfoItem(name="plugin started 05-openshift-cluster-upgrade", time="2023-09-28T00:10:00Z"),
        RuntimeInfoItem(name="plugin started 20-openshift-conformance-validated", time="2023-09-28T00:10:00Z"),
        RuntimeInfoItem(name="plugin started 10-openshift-kube-conformance", time="2023-09-28T00:10:00Z"),
        RuntimeInfoItem(name="plugin started 80-openshift-tests-replay", time="2023-09-28T00:10:00Z"),
        RuntimeInfoItem(
            name="plugin finished 05-openshift-cluster-upgrade",
            time="2023-09-28T00:20:00Z",
            total="10m0s",
            delta="10m0s",
        ),
        RuntimeInfoItem(
            name="plugin finished 10-openshift-kube-conformance",
            time="2023-09-28T00:30:00Z",
            total="20m0s",
            delta="10m0s",
        ),
        RuntimeInfoItem(
            name="plugin finished 20-openshift-conformance-validated",
            time="2023-09-28T01:30:00Z",
            total="1h20m0s",
            delta="1h0m0s",
        ),
        RuntimeInfoItem(
            name="plugin finished 80-openshift-tests-replay",
            time="2023-09-28T01:30:00Z",
            total="1h20m0s",
            delta="0s",
        ),
        RuntimeInfoItem(
            name="plugin finished 99-openshift-artifacts-collector",
            time="2023-09-28T02:00:00Z",
            total="1h50m0s",
            delta="30m0s",
        ),
        RuntimeInfoItem(name="server finished", time="2023-09-28T02:00:00Z", total="2h0m0s"),
    ]


@pytest.mark.parametrize(
    "end, expected",
    [
        ("2023-09-28T00:00:01.5Z", "1.5s"),
        ("2023-09-28T00:00:00.25Z", "250ms"),
        ("2023-09-29T01:02:03Z", "25h2m3s"),
    ],
)
def test_parse_meta_logs_duration_format(end, expected):
    logs = [
        _log("received request", "2023-09-28T00:00:00Z", "POST", "05-openshift-cluster-upgrade"),
        _log("done", end, "PUT", "05-openshift-cluster-upgrade"),
    ]
    finished = parse_meta_logs(logs)[-1]
    assert finished.total == expected
    assert finished.delta == expected


def test_parse_meta_logs_missing_predecessor_saturates():
    logs = [
        _log("received request", "2023-09-28T00:00:00Z", "POST", "10-openshift-kube-conformance"),
        _log("done", "2023-09-28T00:05:00Z", "PUT", "10-openshift-kube-conformance"),
    ]
    finished = parse_meta_logs(logs)[-1]
    assert finished.total == "5m0s"
    assert finished.delta == "2562047h47m16.854775807s"


def test_parse_meta_logs_unknown_plugin_has_no_delta():
    logs = [
        _log("received request", "2023-09-28T00:00:00Z", "POST", "custom-plugin"),
        _log("done", "2023-09-28T00:00:30Z", "PUT", "custom-plugin"),
    ]
    assert parse_meta_logs(logs)[-1] == RuntimeInfoItem(
        name="plugin finished custom-plugin",
        time="2023-09-28T00:00:30Z",
        total="30s",
        delta="",
    )


def test_parse_opct_config_none():
    assert parse_opct_config(None) == []


def test_parse_opct_config_empty():
    assert parse_opct_config({}) == []


def test_parse_opct_config_not_found():
    cms = {"items": [{"metadata": {"name": "unknown-namespace"}}]}
    assert parse_opct_config(cms) == []


def test_parse_opct_config_valid():
    cms = {
        "kind": "ConfigMapList",
        "items": [
            {"metadata": {"name": "kube-root-ca.crt"}, "data": {"ca.crt": "data"}},
            {
                "metadata": {"name": "plugins-config"},
                "data": {"upgrade-target-images": "", "run-mode": "regular", "dev-count": "0"},
            },
            {
                "metadata": {"name": "openshift-provider-certification-version"},
                "data": {
                    "sonobuoy-version": "v0.56.10",
                    "cli-version": "1.0.0",
                    "sonobuoy-image": "quay.io/ocp-cert/sonobuoy:v0.56.10",
                    "cli-commit": "20d1405",
                },
            },
        ],
    }
    version_cm = "openshift-provider-certification-version"
    assert parse_opct_config(cms) == [
        RuntimeInfoItem(name="cli-commit", value="20d1405", config=version_cm),
        RuntimeInfoItem(name="cli-version", value="1.0.0", config=version_cm),
        RuntimeInfoItem(name="sonobuoy-image", value="quay.io/ocp-cert/sonobuoy:v0.56.10", config=version_cm),
        RuntimeInfoItem(name="sonobuoy-version", value="v0.56.10", config=version_cm),
        RuntimeInfoItem(name="dev-count", value="0", config="plugins-config"),
        RuntimeInfoItem(name="run-mode", value="regular", config="plugins-config"),
        RuntimeInfoItem(name="upgrade-target-images", value="", config="plugins-config"),
    ]