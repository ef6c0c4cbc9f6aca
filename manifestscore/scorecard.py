"""Scorecards: graded results of checks run against Kubernetes objects."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping

IGNORED_CHECKS_ANNOTATION = "kube-score/ignore"
OPTIONAL_CHECKS_ANNOTATION = "kube-score/enable"

# Listing one of these keys in an annotation also covers the checks it maps to.
_IMPLIED_IGNORE_ANNOTATIONS: dict[str, tuple[str, ...]] = {
    "container-resources": ("container-ephemeral-storage-request-and-limit",),
}


class Grade(enum.IntEnum):
    """How well an object did in a check; higher is better."""

    CRITICAL = 1
    WARNING = 5
    ALMOST_OK = 7
    ALL_OK = 10

    def __str__(self) -> str:
        return _GRADE_NAMES[self]


_GRADE_NAMES = {
    Grade.CRITICAL: "CRITICAL",
    Grade.WARNING: "WARNING",
    Grade.ALMOST_OK: "OK",
    Grade.ALL_OK: "OK",
}


@dataclass(frozen=True)
class Check:
    """A registered check: its display name, identifier and whether it is opt-in."""

    name: str
    id: str
    comment: str = ""
    optional: bool = False


@dataclass(frozen=True)
class FileLocation:
    """Where an object was defined."""

    name: str = ""
    line: int = 0


@dataclass(frozen=True)
class TestScoreComment:
    """One remark attached to a check result."""

    __test__ = False

    path: str = ""
    summary: str = ""
    description: str = ""
    documentation_url: str = ""


@dataclass
class TestScore:
    """The outcome of running one check against one object."""

    __test__ = False

    check: Check | None = None
    grade: Grade | None = None
    skipped: bool = False
    comments: list[TestScoreComment] = field(default_factory=list)

    def add_comment(
        self, path: str, summary: str, description: str, documentation_url: str = ""
    ) -> None:
        self.comments.append(
            TestScoreComment(
                path=path,
                summary=summary,
                description=description,
                documentation_url=documentation_url,
            )
        )


def _listed(annotations: Mapping[str, Any] | None, key: str, check_id: str) -> bool:
    raw = (annotations or {}).get(key) or ""
    return any(
        value == check_id or value in _IMPLIED_IGNORE_ANNOTATIONS
        for value in str(raw).split(",")
    )


@dataclass
class ScoredObject:
    """All check results collected for a single Kubernetes object."""

    api_version: str
    kind: str
    name: str = ""
    namespace: str = ""
    file_location: FileLocation = field(default_factory=FileLocation)
    checks: list[TestScore] = field(default_factory=list)
    use_ignore_checks_annotation: bool = False
    use_optional_checks_annotation: bool = False
    enabled_optional_tests: frozenset[str] = frozenset()

    def resource_ref_key(self) -> str:
        return f"{self.kind}/{self.api_version}/{self.namespace}/{self.name}"

    def human_friendly_ref(self) -> str:
        ref = self.name
        if self.namespace:
            ref += "/" + self.namespace
        return f"{ref} {self.api_version}/{self.kind}"

    def any_below_or_equal_to_grade(self, threshold: Grade) -> bool:
        return any(
            not score.skipped and (score.grade is None or score.grade <= threshold)
            for score in self.checks
        )

    def is_enabled(
        self,
        check: Check,
        annotations: Mapping[str, Any] | None,
        child_annotations: Mapping[str, Any] | None,
    ) -> bool:
        """Decide from annotations whether a check applies to this object."""
        ignore = self.use_ignore_checks_annotation
        optional = self.use_optional_checks_annotation
        if ignore and _listed(child_annotations, IGNORED_CHECKS_ANNOTATION, check.id):
            return False
        if optional and _listed(child_annotations, OPTIONAL_CHECKS_ANNOTATION, check.id):
            return True
        if ignore and _listed(annotations, IGNORED_CHECKS_ANNOTATION, check.id):
            return False
        if optional and _listed(annotations, OPTIONAL_CHECKS_ANNOTATION, check.id):
            return True
        # Optional checks stay off unless explicitly enabled above.
        return not check.optional

    def add(
        self,
        score: TestScore,
        check: Check,
        file_location: FileLocation,
        *args: Mapping[str, Any] | None,
    ) -> TestScore:
        """Record a result; the annotation maps given decide whether it is skipped."""
        result = replace(score, check=check, comments=list(score.comments))
        self.file_location = file_location

        skip = False
        if len(args) == 1:
            skip = not self.is_enabled(check, args[0], None)
        elif len(args) == 2:
            skip = not self.is_enabled(check, args[0], args[1])

        if skip:
            result.skipped = True
            result.comments = [
                TestScoreComment(summary=f"Skipped because {check.id} is ignored")
            ]

        self.checks.append(result)
        return result


class Scorecard(dict):
    """Scored objects keyed by kind, apiVersion, namespace and name."""

    def new_object(
        self,
        manifest: Mapping[str, Any],
        use_ignore_checks_annotation: bool = False,
        use_optional_checks_annotation: bool = False,
        enabled_optional_tests: Iterable[str] | None = None,
    ) -> ScoredObject:
        """Return the scored object for a manifest, creating it on first sight."""
        metadata = manifest.get("metadata") or {}
        obj = ScoredObject(
            api_version=manifest.get("apiVersion", "") or "",
            kind=manifest.get("kind", "") or "",
            name=metadata.get("name", "") or "",
            namespace=metadata.get("namespace", "") or "",
            use_ignore_checks_annotation=use_ignore_checks_annotation,
            use_optional_checks_annotation=use_optional_checks_annotation,
            enabled_optional_tests=frozenset(enabled_optional_tests or ()),
        )
        return self.setdefault(obj.resource_ref_key(), obj)

    def any_below_or_equal_to_grade(self, threshold: Grade) -> bool:
        return any(obj.any_below_or_equal_to_grade(threshold) for obj in self.values())