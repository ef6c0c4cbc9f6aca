"""Kubernetes label selector evaluation."""

from __future__ import annotations

import re
from typing import Any, Mapping

_VALUE_RE = re.compile(r"(([A-Za-z0-9][-A-Za-z0-9_.]*)?[A-Za-z0-9])?")
_NAME_RE = re.compile(r"[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?")
_SUBDOMAIN_RE = re.compile(r"[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*")

_SET_OPERATORS = {"In", "NotIn"}
_EXISTENCE_OPERATORS = {"Exists", "DoesNotExist"}


class LabelSelectorError(ValueError):
    """A label selector that cannot be evaluated."""


def _validate_key(key: str) -> None:
    parts = key.split("/")
    if len(parts) > 2:
        raise LabelSelectorError(f"invalid label key {key!r}")
    if len(parts) == 2:
        prefix = parts[0]
        if not prefix or len(prefix) > 253 or not _SUBDOMAIN_RE.fullmatch(prefix):
            raise LabelSelectorError(f"invalid label key prefix in {key!r}")
    name = parts[-1]
    if not name or len(name) > 63 or not _NAME_RE.fullmatch(name):
        raise LabelSelectorError(f"invalid label key {key!r}")


def _validate_value(value: str) -> None:
    if len(value) > 63 or not _VALUE_RE.fullmatch(value):
        raise LabelSelectorError(f"invalid label value {value!r}")


def _requirements(selector: Mapping[str, Any]) -> list[tuple[str, str, frozenset[str]]]:
    requirements = []
    for key, value in (selector.get("matchLabels") or {}).items():
        key, value = str(key), str(value)
        _validate_key(key)
        _validate_value(value)
        requirements.append((key, "In", frozenset({value})))

    for expression in selector.get("matchExpressions") or []:
        key = str(expression.get("key", ""))
        operator = expression.get("operator", "")
        values = [str(v) for v in expression.get("values") or []]
        _validate_key(key)
        if operator in _SET_OPERATORS:
            if not values:
                raise LabelSelectorError(f"operator {operator} needs values for {key!r}")
        elif operator in _EXISTENCE_OPERATORS:
            if values:
                raise LabelSelectorError(f"operator {operator} takes no values for {key!r}")
        else:
            raise LabelSelectorError(f"{operator!r} is not a valid label selector operator")
        for value in values:
            _validate_value(value)
        requirements.append((key, operator, frozenset(values)))
    return requirements


def _satisfied(key: str, operator: str, values: frozenset[str], labels: Mapping[str, str]) -> bool:
    present = key in labels
    if operator == "In":
        return present and labels[key] in values
    if operator == "NotIn":
        return not present or labels[key] not in values
    if operator == "Exists":
        return present
    return not present


def selector_matches(
    selector: Mapping[str, Any] | None, labels: Mapping[str, str] | None
) -> bool:
    """Whether a LabelSelector matches a label set.

    A missing selector matches nothing; an empty one matches everything.
    Raises LabelSelectorError if the selector is malformed.
    """
    if selector is None:
        return False
    labels = {str(k): str(v) for k, v in (labels or {}).items()}
    return all(
        _satisfied(key, operator, values, labels)
        for key, operator, values in _requirements(selector)
    )


def label_selector_matches_labels(
    selector_labels: Mapping[str, str] | None, labels: Mapping[str, str] | None
) -> bool:
    """Whether plain key/value selector labels match; invalid selectors never match."""
    try:
        return selector_matches({"matchLabels": selector_labels or {}}, labels)
    except LabelSelectorError:
        return False