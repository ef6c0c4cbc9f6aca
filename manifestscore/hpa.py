"""Checks for HorizontalPodAutoscaler objects."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping

from manifestscore.scorecard import Grade, TestScore

_Identity = tuple[str, str, str, str]


def _text(mapping: Mapping[str, Any], key: str) -> str:
    return mapping.get(key) or ""


def _identity(obj: Mapping[str, Any]) -> _Identity:
    """apiVersion, kind, name and namespace of an object."""
    metadata = obj.get("metadata") or {}
    return (
        _text(obj, "apiVersion"),
        _text(obj, "kind"),
        _text(metadata, "name"),
        _text(metadata, "namespace"),
    )


def hpa_has_target(
    all_targetable_objs: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build a check that an HPA's scaleTargetRef names one of the given objects."""
    known = {_identity(target) for target in all_targetable_objs or ()}

    def check(hpa: Mapping[str, Any]) -> TestScore:
        ref = (hpa.get("spec") or {}).get("scaleTargetRef") or {}
        wanted = (
            _text(ref, "apiVersion"),
            _text(ref, "kind"),
            _text(ref, "name"),
            _identity(hpa)[3],
        )
        if wanted in known:
            return TestScore(grade=Grade.ALL_OK)
        score = TestScore(grade=Grade.CRITICAL)
        score.add_comment("", "The HPA target does not match anything", "")
        return score

    return check