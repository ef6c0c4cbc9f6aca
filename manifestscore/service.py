"""Checks for Service objects."""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Iterable, Mapping

from manifestscore.labels import label_selector_matches_labels
from manifestscore.scorecard import Grade, TestScore


def _metadata(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _namespace(obj: Mapping[str, Any]) -> str:
    return _metadata(obj).get("namespace", "") or ""


def _workload_template(workload: Mapping[str, Any]) -> Mapping[str, Any]:
    spec = workload.get("spec") or {}
    if workload.get("kind") == "CronJob":
        job_spec = (spec.get("jobTemplate") or {}).get("spec") or {}
        return job_spec.get("template") or {}
    return spec.get("template") or {}


def service_targets_pod(
    pods: Iterable[Mapping[str, Any]] | None,
    workloads: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that a Service selects at least one pod or workload pod template."""
    labels_by_namespace: dict[str, list[Mapping[str, str]]] = defaultdict(list)
    for pod in pods or []:
        labels_by_namespace[_namespace(pod)].append(_metadata(pod).get("labels") or {})
    for workload in workloads or []:
        template_labels = _metadata(_workload_template(workload)).get("labels") or {}
        labels_by_namespace[_namespace(workload)].append(template_labels)

    def check(service: Mapping[str, Any]) -> TestScore:
        spec = service.get("spec") or {}
        score = TestScore()
        # ExternalName services have no selector.
        if spec.get("type") == "ExternalName":
            score.grade = Grade.ALL_OK
            return score

        selector = spec.get("selector")
        has_match = any(
            label_selector_matches_labels(selector, labels)
            for labels in labels_by_namespace.get(_namespace(service), [])
        )
        if has_match:
            score.grade = Grade.ALL_OK
        else:
            score.grade = Grade.CRITICAL
            score.add_comment("", "The services selector does not match any pods", "")
        return score

    return check


def service_type(service: Mapping[str, Any]) -> TestScore:
    """NodePort services should be avoided."""
    score = TestScore()
    if (service.get("spec") or {}).get("type") == "NodePort":
        score.grade = Grade.WARNING
        score.add_comment(
            "",
            "The service is of type NodePort",
            "NodePort services should be avoided as they are insecure, and can not be used "
            "together with NetworkPolicies. LoadBalancers or use of an Ingress is "
            "recommended over NodePorts.",
        )
        return score
    score.grade = Grade.ALL_OK
    return score