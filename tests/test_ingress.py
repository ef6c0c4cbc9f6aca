import pytest

from manifestscore.ingress import ingress_targets_service, ingress_targets_service_common
from manifestscore.scorecard import Grade


def _backend_service(name, namespace=None):
    metadata = {"name": name, **({"namespace": namespace} if namespace else {})}
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": metadata,
        "spec": {"ports": [{"name": "http", "port": 80}]},
    }


def _ingress(backend, namespace=None, path="/"):
    return {
        "apiVersion": "networking.k8s.io/v1",
        "kind": "Ingress",
        "metadata": {"name": "ing", **({"namespace": namespace} if namespace else {})},
        "spec": {"rules": [{"http": {"paths": [{"path": path, "backend": backend}]}}]},
    }


def _v1_backend(name, number=None, port_name=None):
    port = {"number": number} if number is not None else {"name": port_name}
    return {"service": {"name": name, "port": port}}


APP_SERVICES = [_backend_service("app")]


@pytest.mark.parametrize(
    "backend, grade",
    [
        (_v1_backend("app", number=80), Grade.ALL_OK),
        (_v1_backend("app", port_name="http"), Grade.ALL_OK),
        ({"serviceName": "app", "servicePort": 80}, Grade.ALL_OK),
        ({"serviceName": "app", "servicePort": "http"}, Grade.ALL_OK),
        ({"serviceName": "app", "servicePort": 81}, Grade.CRITICAL),
    ],
)
def test_backend_matching(backend, grade):
    score = ingress_targets_service(APP_SERVICES)(_ingress(backend))
    assert score.grade == grade
    assert (score.comments == []) is (grade == Grade.ALL_OK)


def test_no_match_by_number():
    ingress = _ingress(_v1_backend("other", number=80), path="/api")
    score = ingress_targets_service_common(ingress, APP_SERVICES)
    assert score.grade == Grade.CRITICAL
    assert [(c.path, c.summary, c.description) for c in score.comments] == [
        ("/api", "No service match was found", "No service with name other and port number 80 was found")
    ]


def test_no_match_by_name_mentions_port_name():
    score = ingress_targets_service_common(_ingress(_v1_backend("app", port_name="grpc")), APP_SERVICES)
    assert score.grade == Grade.CRITICAL
    assert score.comments[0].description == "No service with name app and port named grpc was found"


@pytest.mark.parametrize("ingress_namespace, grade", [("b", Grade.CRITICAL), ("a", Grade.ALL_OK)])
def test_namespace_must_match(ingress_namespace, grade):
    services = [_backend_service("app", namespace="a")]
    ingress = _ingress(_v1_backend("app", number=80), namespace=ingress_namespace)
    assert ingress_targets_service_common(ingress, services).grade == grade


def test_backend_without_service():
    ingress = _ingress({"resource": {"kind": "Bucket", "name": "b"}})
    score = ingress_targets_service_common(ingress, APP_SERVICES)
    assert score.grade == Grade.CRITICAL
    assert score.comments[0].description == ""


def test_rules_without_http_are_ignored():
    ingress = {"metadata": {}, "spec": {"rules": [{"host": "example.com"}]}}
    assert ingress_targets_service_common(ingress, []).grade == Grade.ALL_OK