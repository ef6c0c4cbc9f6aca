"""Checks on object metadata."""

from __future__ import annotations

import re
from typing import Any, Mapping

from manifestscore.scorecard import Grade, TestScore

_LABEL_VALUE_RE = re.compile(r"(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?")


def validate_label_values(meta: Mapping[str, Any]) -> TestScore:
    """Flag label values that Kubernetes would reject."""
    object_labels = dict((meta.get("metadata") or {}).get("labels") or {})
    invalid = [key for key, value in object_labels.items() if not _LABEL_VALUE_RE.fullmatch(str(value))]

    score = TestScore(grade=Grade.CRITICAL if invalid else Grade.ALL_OK)
    for key in invalid:
        score.add_comment(
            key,
            "Invalid label value",
            "The label value is invalid, and will not be accepted by Kubernetes",
        )
    return score