"""Checks relating pods and NetworkPolicies."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from manifestscore.labels import LabelSelectorError, selector_matches
from manifestscore.scorecard import Grade, TestScore


def _metadata(obj: Mapping[str, Any]) -> Mapping[str, Any]:
    return obj.get("metadata") or {}


def _namespace(obj: Mapping[str, Any]) -> str:
    return _metadata(obj).get("namespace", "") or ""


def _labels(obj: Mapping[str, Any]) -> Mapping[str, str]:
    return _metadata(obj).get("labels") or {}


def _workload_template(workload: Mapping[str, Any]) -> Mapping[str, Any]:
    spec = workload.get("spec") or {}
    if workload.get("kind") == "CronJob":
        job_spec = (spec.get("jobTemplate") or {}).get("spec") or {}
        return job_spec.get("template") or {}
    return spec.get("template") or {}


def _selects(netpol: Mapping[str, Any], labels: Mapping[str, str]) -> bool:
    selector = (netpol.get("spec") or {}).get("podSelector") or {}
    try:
        return selector_matches(selector, labels)
    except LabelSelectorError:
        return False


def pod_has_network_policy(
    all_netpols: Iterable[Mapping[str, Any]] | None,
) -> Callable[..., TestScore]:
    """Build a check that a pod is covered by ingress and egress NetworkPolicies."""
    netpols = list(all_netpols or [])

    def check(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
        has_egress = False
        has_ingress = False
        namespace = _namespace(pod_template)
        labels = _labels(pod_template)

        for netpol in netpols:
            if _namespace(netpol) != namespace or not _selects(netpol, labels):
                continue
            spec = netpol.get("spec") or {}
            policy_types = spec.get("policyTypes") or []
            # Without policyTypes every policy affects ingress, and egress only
            # when it carries egress rules.
            if not policy_types:
                has_ingress = True
                if spec.get("egress"):
                    has_egress = True
            else:
                has_ingress = has_ingress or "Ingress" in policy_types
                has_egress = has_egress or "Egress" in policy_types

        score = TestScore()
        if has_egress and has_ingress:
            score.grade = Grade.ALL_OK
        elif has_egress:
            score.grade = Grade.WARNING
            score.add_comment(
                "",
                "The pod does not have a matching ingress NetworkPolicy",
                "Add a ingress policy to the pods NetworkPolicy",
            )
        elif has_ingress:
            score.grade = Grade.WARNING
            score.add_comment(
                "",
                "The pod does not have a matching egress NetworkPolicy",
                "Add a egress policy to the pods NetworkPolicy",
            )
        else:
            score.grade = Grade.CRITICAL
            score.add_comment(
                "",
                "The pod does not have a matching NetworkPolicy",
                "Create a NetworkPolicy that targets this pod to control who/what can "
                "communicate with this pod. Note, this feature needs to be supported by "
                "the CNI implementation used in the Kubernetes cluster to have an effect.",
            )
        return score

    return check


def network_policy_targets_pod(
    pods: Iterable[Mapping[str, Any]] | None,
    workloads: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that a NetworkPolicy selects at least one pod or workload."""
    pod_list = list(pods or [])
    workload_list = list(workloads or [])

    def check(netpol: Mapping[str, Any]) -> TestScore:
        namespace = _namespace(netpol)
        has_match = any(
            _namespace(pod) == namespace and _selects(netpol, _labels(pod))
            for pod in pod_list
        ) or any(
            _namespace(workload) == namespace
            and _selects(netpol, _labels(_workload_template(workload)))
            for workload in workload_list
        )

        score = TestScore()
        if has_match:
            score.grade = Grade.ALL_OK
        else:
            score.grade = Grade.CRITICAL
            score.add_comment("", "The NetworkPolicys selector doesn't match any pods", "")
        return score

    return check