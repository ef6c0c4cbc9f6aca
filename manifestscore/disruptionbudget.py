"""Checks that workloads are covered by PodDisruptionBudgets."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from manifestscore.labels import LabelSelectorError, selector_matches
from manifestscore.scorecard import Grade, TestScore

_NO_MATCH_DESCRIPTION = (
    "It's recommended to define a PodDisruptionBudget to avoid unexpected downtime "
    "during Kubernetes maintenance operations, such as when draining a node."
)

WorkloadCheck = Callable[[Mapping[str, Any]], TestScore]


def has_matching(
    budgets: Iterable[Mapping[str, Any]] | None,
    namespace: str,
    labels: Mapping[str, str] | None,
) -> bool:
    """Whether any budget in the namespace selects the given pod labels.

    Raises LabelSelectorError if a budget in the namespace has a malformed selector.
    """
    wanted_namespace = namespace or ""
    for budget in budgets or ():
        if ((budget.get("metadata") or {}).get("namespace") or "") != wanted_namespace:
            continue
        selector = (budget.get("spec") or {}).get("selector")
        try:
            matched = selector_matches(selector, labels)
        except LabelSelectorError as exc:
            raise LabelSelectorError(f"failed to create selector: {exc}") from exc
        if matched:
            return True
    return False


def _budget_check(budgets: Iterable[Mapping[str, Any]] | None, kind_word: str) -> WorkloadCheck:
    known = list(budgets or ())

    def check(workload: Mapping[str, Any]) -> TestScore:
        score = TestScore()
        workload_spec = workload.get("spec") or {}
        replicas = workload_spec.get("replicas")
        if replicas is not None and replicas < 2:
            score.skipped = True
            score.add_comment("", f"Skipped because the {kind_word} has less than 2 replicas", "")
            return score

        template_meta = (workload_spec.get("template") or {}).get("metadata") or {}
        workload_namespace = (workload.get("metadata") or {}).get("namespace") or ""

        if has_matching(known, workload_namespace, template_meta.get("labels") or {}):
            score.grade = Grade.ALL_OK
        else:
            score.grade = Grade.CRITICAL
            score.add_comment("", "No matching PodDisruptionBudget was found", _NO_MATCH_DESCRIPTION)
        return score

    return check


def stateful_set_has(budgets: Iterable[Mapping[str, Any]] | None) -> WorkloadCheck:
    """Build a check that a StatefulSet is targeted by a PodDisruptionBudget."""
    return _budget_check(budgets, "statefulset")


def deployment_has(budgets: Iterable[Mapping[str, Any]] | None) -> WorkloadCheck:
    """Build a check that a Deployment is targeted by a PodDisruptionBudget."""
    return _budget_check(budgets, "deployment")


def has_policy(pdb: Mapping[str, Any]) -> TestScore:
    """A PodDisruptionBudget must set minAvailable or maxUnavailable."""
    policy = pdb.get("spec") or {}
    if policy.get("minAvailable") is not None or policy.get("maxUnavailable") is not None:
        return TestScore(grade=Grade.ALL_OK)
    score = TestScore(grade=Grade.CRITICAL)
    score.add_comment(
        "",
        "PodDisruptionBudget missing policy",
        "PodDisruptionBudget should specify minAvailable or maxUnavailable.",
    )
    return score