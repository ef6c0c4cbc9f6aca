"""Detection of deprecated apiVersions that have a stable replacement."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from manifestscore.scorecard import Grade, TestScore


@dataclass(frozen=True)
class Semver:
    """A Kubernetes major.minor version."""

    major: int = 0
    minor: int = 0

    def less_than(self, other: Semver) -> bool:
        return (self.major, self.minor) < (other.major, other.minor)

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}"


@dataclass(frozen=True)
class _Recommended:
    new_api: str
    available_since: Semver


_V1_9 = Semver(1, 9)
_V1_19 = Semver(1, 19)
_V1_21 = Semver(1, 21)

_WITH_STABLE: dict[str, dict[str, _Recommended]] = {
    "extensions/v1beta1": {
        "Deployment": _Recommended("apps/v1", _V1_9),
        "DaemonSet": _Recommended("apps/v1", _V1_9),
        "Ingress": _Recommended("networking.k8s.io/v1", _V1_19),
        "IngressClass": _Recommended("networking.k8s.io/v1", _V1_19),
    },
    "apps/v1beta1": {
        "Deployment": _Recommended("apps/v1", _V1_9),
        "StatefulSet": _Recommended("apps/v1", _V1_9),
    },
    "apps/v1beta2": {
        "Deployment": _Recommended("apps/v1", _V1_9),
        "StatefulSet": _Recommended("apps/v1", _V1_9),
        "DaemonSet": _Recommended("apps/v1", _V1_9),
    },
    "batch/v1beta1": {
        "CronJob": _Recommended("batch/v1", _V1_21),
    },
    "policy/v1beta1": {
        "PodDisruptionBudget": _Recommended("policy/v1", _V1_21),
    },
    "networking.k8s.io/v1beta1": {
        "Ingress": _Recommended("networking.k8s.io/v1", _V1_19),
        "IngressClass": _Recommended("networking.k8s.io/v1", _V1_19),
    },
}


def meta_stable_available(kubernetes_version: Semver) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that warns when an object uses a deprecated apiVersion and kind."""

    def check(meta: Mapping[str, Any]) -> TestScore:
        score = TestScore(grade=Grade.ALL_OK)
        api_version = meta.get("apiVersion", "") or ""
        kind = meta.get("kind", "") or ""
        recommended = _WITH_STABLE.get(api_version, {}).get(kind)
        if recommended is None:
            return score
        # The replacement does not exist yet in the targeted Kubernetes version.
        if kubernetes_version.less_than(recommended.available_since):
            return score

        score.grade = Grade.WARNING
        score.add_comment(
            "",
            f"The apiVersion and kind {api_version}/{kind} is deprecated",
            f"It's recommended to use {recommended.new_api} instead which has been "
            f"available since Kubernetes {recommended.available_since}",
        )
        return score

    return check