"""Checks for CronJob objects."""

from __future__ import annotations

from functools import reduce
from typing import Any, Mapping

from manifestscore.scorecard import Grade, TestScore

_VALID_RESTART_POLICIES = frozenset({"Never", "OnFailure"})
_RESTART_POLICY_HINT = "Valid CronJob RestartPolicy settings are Never or OnFailure"


def _nested(obj: Mapping[str, Any], *keys: str) -> Mapping[str, Any]:
    """Follow nested mapping keys, treating missing or null values as empty."""
    return reduce(lambda node, key: node.get(key) or {}, keys, obj)


def _critical(summary: str, description: str) -> TestScore:
    score = TestScore(grade=Grade.CRITICAL)
    score.add_comment("", summary, description)
    return score


def cron_job_has_deadline(job: Mapping[str, Any]) -> TestScore:
    """A CronJob should set startingDeadlineSeconds."""
    if (job.get("spec") or {}).get("startingDeadlineSeconds") is not None:
        return TestScore(grade=Grade.ALL_OK)
    return _critical(
        "The CronJob should have startingDeadlineSeconds configured",
        "This makes sure that jobs are automatically cancelled if they can not be scheduled",
    )


def cron_job_has_restart_policy(job: Mapping[str, Any]) -> TestScore:
    """A CronJob's restartPolicy must be Never or OnFailure."""
    pod_spec = _nested(job, "spec", "jobTemplate", "spec", "template", "spec")
    restart_policy = pod_spec.get("restartPolicy") or ""

    if restart_policy in _VALID_RESTART_POLICIES:
        return TestScore(grade=Grade.ALL_OK)
    if restart_policy:
        return _critical("The CronJob must have a valid RestartPolicy configured", _RESTART_POLICY_HINT)
    return _critical("The CronJob is missing a valid RestartPolicy", _RESTART_POLICY_HINT)