import pytest

from manifestscore.probes import container_probes, pod_is_targeted_by_service
from manifestscore.scorecard import Grade

PAIR = {"foo1": "bar1", "foo2": "bar2"}


def _selecting(selector, namespace=""):
    return {"kind": "Service", "metadata": {"name": "s", "namespace": namespace}, "spec": {"selector": selector}}


@pytest.mark.parametrize(
    "pod_labels, pod_namespace, selector, service_namespace, expected",
    [
        ({"foo": "bar"}, "", {"foo": "bar"}, "", True),
        ({"foo": "bar"}, "", {"foo": "baz"}, "", False),
        (PAIR, "", PAIR, "", True),
        (PAIR, "", {"foo1": "bar1", "foo2": "bar-whatever"}, "", False),
        (PAIR, "foospace", PAIR, "foospace", True),
        (PAIR, "foospace", PAIR, "someOtherNamespace", False),
    ],
    ids=[
        "single-label-match",
        "single-label-mismatch",
        "multi-label-match",
        "multi-non-full-match",
        "same-namespace",
        "different-namespace",
    ],
)
def test_pod_is_targeted_by_service(pod_labels, pod_namespace, selector, service_namespace, expected):
    pod = {"metadata": {"namespace": pod_namespace, "labels": pod_labels}}
    assert pod_is_targeted_by_service(pod, _selecting(selector, service_namespace)) is expected


POD_META = {"apiVersion": "v1", "kind": "Pod"}
CRONJOB_META = {"apiVersion": "batch/v1", "kind": "CronJob"}
WEB = [_selecting({"app": "web"})]
HTTP = {"httpGet": {"path": "/ready", "port": 8080}}
HTTP_PORT_TEXT = {"httpGet": {"path": "/ready", "port": "8080"}}
EXEC = {"exec": {"command": ["cat", "/tmp/ok"]}}
TCP = {"tcpSocket": {"port": 8080}}
SAME = "Container has the same readiness and liveness probe"


@pytest.mark.parametrize(
    "services, probes, type_meta, grade, summaries",
    [
        (WEB, {}, CRONJOB_META, Grade.ALL_OK, []),
        (WEB, {"readinessProbe": HTTP, "livenessProbe": HTTP}, POD_META, Grade.CRITICAL, [SAME]),
        (WEB, {"readinessProbe": HTTP, "livenessProbe": HTTP_PORT_TEXT}, POD_META, Grade.CRITICAL, [SAME]),
        ([], {"readinessProbe": EXEC, "livenessProbe": EXEC}, POD_META, Grade.CRITICAL, [SAME]),
        (WEB, {"readinessProbe": HTTP, "livenessProbe": TCP}, POD_META, Grade.ALL_OK, []),
        (
            [_selecting({"app": "other"})],
            {},
            POD_META,
            Grade.ALL_OK,
            ["The pod is not targeted by a service, skipping probe checks."],
        ),
        (WEB, {}, POD_META, Grade.CRITICAL, ["Container is missing a readinessProbe"]),
        (WEB, {"readinessProbe": HTTP}, POD_META, Grade.ALMOST_OK, ["Container is missing a livenessProbe"]),
    ],
    ids=[
        "batch-job",
        "identical-http",
        "identical-http-port-text",
        "identical-exec",
        "different-probes",
        "not-targeted",
        "missing-readiness",
        "missing-liveness",
    ],
)
def test_container_probes(services, probes, type_meta, grade, summaries):
    container = {"name": "c", "image": "app:1", **probes}
    template = {"metadata": {"labels": {"app": "web"}}, "spec": {"containers": [container]}}
    score = container_probes(services)(template, type_meta)
    assert score.grade == grade
    assert [c.summary for c in score.comments] == summaries