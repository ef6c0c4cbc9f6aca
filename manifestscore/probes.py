"""Checks on readiness and liveness probes."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from manifestscore.labels import label_selector_matches_labels
from manifestscore.scorecard import Grade, TestScore

PROBES_DOCUMENTATION_URL = "README_PROBES.md"


def _metadata(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _group(api_version: str) -> str:
    return api_version.split("/", 1)[0] if "/" in api_version else ""


def _int_value(port: Any) -> int:
    if isinstance(port, int):
        return port
    try:
        return int(str(port))
    except ValueError:
        return 0


def _identical(readiness: Mapping[str, Any], liveness: Mapping[str, Any]) -> bool:
    r_http, l_http = readiness.get("httpGet"), liveness.get("httpGet")
    if r_http is not None and l_http is not None:
        if (r_http.get("path", "") or "") == (l_http.get("path", "") or "") and _int_value(
            r_http.get("port")
        ) == _int_value(l_http.get("port")):
            return True

    r_tcp, l_tcp = readiness.get("tcpSocket"), liveness.get("tcpSocket")
    if r_tcp is not None and l_tcp is not None and r_tcp.get("port") == l_tcp.get("port"):
        return True

    r_exec, l_exec = readiness.get("exec"), liveness.get("exec")
    if r_exec is not None and l_exec is not None:
        if list(r_exec.get("command") or []) == list(l_exec.get("command") or []):
            return True
    return False


def pod_is_targeted_by_service(pod: Mapping[str, Any], service: Mapping[str, Any]) -> bool:
    """Whether a Service in the same namespace selects the pod's labels."""
    if (_metadata(pod).get("namespace", "") or "") != (
        _metadata(service).get("namespace", "") or ""
    ):
        return False
    return label_selector_matches_labels(
        (service.get("spec") or {}).get("selector"),
        _metadata(pod).get("labels"),
    )


def container_probes(
    all_services: Iterable[Mapping[str, Any]] | None,
) -> Callable[..., TestScore]:
    """Build a check that a pod's probes are present and safely configured.

    One probe of each kind suffices for the whole pod; readiness probes are only
    required when a Service targets the pod.
    """
    services = list(all_services or [])

    def check(pod_template: Mapping[str, Any], type_meta: Mapping[str, Any] | None = None) -> TestScore:
        score = TestScore()
        type_meta = type_meta or {}
        kind = type_meta.get("kind", "") or ""
        if kind in ("CronJob", "Job") and _group(type_meta.get("apiVersion", "") or "") == "batch":
            score.grade = Grade.ALL_OK
            return score

        spec = pod_template.get("spec") or {}
        containers = [*(spec.get("initContainers") or []), *(spec.get("containers") or [])]

        has_readiness = False
        has_liveness = False
        identical = False
        targeted = any(pod_is_targeted_by_service(pod_template, s) for s in services)

        for container in containers:
            readiness = container.get("readinessProbe")
            liveness = container.get("livenessProbe")
            has_readiness = has_readiness or readiness is not None
            has_liveness = has_liveness or liveness is not None
            if readiness is not None and liveness is not None and _identical(readiness, liveness):
                identical = True

        if has_liveness and has_readiness and identical:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "Container has the same readiness and liveness probe",
                "Using the same probe for liveness and readiness is very likely dangerous. "
                "Generally it's better to avoid the livenessProbe than re-using the readinessProbe.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        if not targeted:
            score.grade = Grade.ALL_OK
            score.add_comment("", "The pod is not targeted by a service, skipping probe checks.", "")
            return score

        if not has_readiness:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "Container is missing a readinessProbe",
                "A readinessProbe should be used to indicate when the service is ready to receive traffic. "
                "Without it, the Pod is risking to receive traffic before it has booted. "
                "It's also used during rollouts, and can prevent downtime if a new version of the application is failing.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        if not has_liveness:
            score.grade = Grade.ALMOST_OK
            score.add_comment(
                "",
                "Container is missing a livenessProbe",
                "A livenessProbe can be used to restart the container if it's deadlocked or has crashed without exiting. "
                "It's only recommended to setup a livenessProbe if you really need one.",
                PROBES_DOCUMENTATION_URL,
            )
            return score

        score.grade = Grade.ALL_OK
        return score

    return check