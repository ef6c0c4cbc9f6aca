import pytest

from manifestscore.hpa import hpa_has_target
from manifestscore.scorecard import Grade


def _hpa(kind, name, api_version, namespace):
    return {
        "apiVersion": "autoscaling/v1",
        "kind": "HorizontalPodAutoscaler",
        "metadata": {"namespace": namespace} if namespace else {},
        "spec": {"scaleTargetRef": {"kind": kind, "name": name, "apiVersion": api_version}},
    }


def _targets(namespace):
    """A single apps/v1 Deployment named foo, or nothing when namespace is None."""
    if namespace is None:
        return None
    metadata = {"name": "foo", "namespace": namespace} if namespace else {"name": "foo"}
    return [{"apiVersion": "apps/v1", "kind": "Deployment", "metadata": metadata}]


@pytest.mark.parametrize(
    "kind, name, api_version, hpa_namespace, target_namespace, expected",
    [
        ("Deployment", "foo", "apps/v1", "", None, Grade.CRITICAL),
        ("Deployment", "foo", "apps/v1", "", "", Grade.ALL_OK),
        ("Deployment", "foo", "apps/v1", "foospace", "foospace", Grade.ALL_OK),
        ("Deployment", "foo", "apps/v1", "foospace2", "foospace", Grade.CRITICAL),
        ("Deployment", "not-foo", "apps/v1", "foospace", "foospace", Grade.CRITICAL),
        ("ReplicaSet", "foo", "apps/v1", "foospace", "foospace", Grade.CRITICAL),
        ("Deployment", "foo", "apps/v1beta1", "foospace", "foospace", Grade.CRITICAL),
    ],
    ids=[
        "no-match",
        "match-no-namespace",
        "match-namespace",
        "no-match-namespace",
        "no-match-name",
        "no-match-kind",
        "no-match-version",
    ],
)
def test_hpa_has_target(kind, name, api_version, hpa_namespace, target_namespace, expected):
    hpa = _hpa(kind, name, api_version, hpa_namespace)
    assert hpa_has_target(_targets(target_namespace))(hpa).grade == expected


def test_no_target_comment():
    score = hpa_has_target([])(_hpa("Deployment", "foo", "apps/v1", ""))
    assert [c.summary for c in score.comments] == ["The HPA target does not match anything"]