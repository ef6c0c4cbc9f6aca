"""Checks on the containers of a pod template."""

from __future__ import annotations

from fractions import Fraction
from typing import Any, Callable, Iterable, Iterator, Mapping

from manifestscore.quantity import parse_quantity
from manifestscore.scorecard import Grade, TestScore

_MAX_PORT_NAME_LENGTH = 15
_UNPINNED_TAGS = ("", "latest")
_RESOURCE_LABELS = {"cpu": "CPU", "memory": "Memory"}
_MISSING_REASONS = {
    "limits": ("limit", "Resource limits are recommended to avoid resource DDOS."),
    "requests": (
        "request",
        "Resource requests are recommended to make sure that the application can start and run without crashing.",
    ),
}
_EQUAL_REASON = "Having equal requests and limits is recommended to avoid resource DDOS of the node during spikes."

PodCheck = Callable[..., TestScore]
Finding = tuple[Grade, str, str]
Container = Mapping[str, Any]


def _all_containers(pod_template: Mapping[str, Any]) -> list[Container]:
    spec = pod_template.get("spec") or {}
    return [*(spec.get("initContainers") or []), *(spec.get("containers") or [])]


def _resource(container: Container, section: str, name: str) -> Fraction:
    raw = ((container.get("resources") or {}).get(section) or {}).get(name)
    return Fraction(0) if raw is None else parse_quantity(raw)


def _name(container: Container) -> str:
    return container.get("name") or ""


def _image_tag(container: Container) -> str:
    return container_tag(container.get("image") or "")


def _evaluate(pod_template: Mapping[str, Any], inspect: Callable[[Container], Iterable[Finding]]) -> TestScore:
    """Start from ALL_OK; each finding adds a comment and sets the grade."""
    score = TestScore(grade=Grade.ALL_OK)
    for container in _all_containers(pod_template):
        for grade, summary, description in inspect(container):
            score.add_comment(_name(container), summary, description)
            score.grade = grade
    return score


def container_resources(require_cpu_limit: bool, require_memory_limit: bool) -> PodCheck:
    """Build a check that containers set resource requests and, as required, limits."""
    rules = [
        (section, resource)
        for section, resource, enabled in (
            ("limits", "cpu", require_cpu_limit),
            ("limits", "memory", require_memory_limit),
            ("requests", "cpu", True),
            ("requests", "memory", True),
        )
        if enabled
    ]

    def check(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
        score = TestScore()
        containers = _all_containers(pod_template)
        missing: set[str] = set()

        for container in containers:
            for section, resource in rules:
                if _resource(container, section, resource) != 0:
                    continue
                noun, reason = _MISSING_REASONS[section]
                score.add_comment(
                    _name(container),
                    f"{_RESOURCE_LABELS[resource]} {noun} is not set",
                    f"{reason} Set resources.{section}.{resource}",
                )
                missing.add(section)

        if not containers:
            score.grade = Grade.CRITICAL
            score.add_comment("", "No containers defined", "")
        elif "limits" in missing:
            score.grade = Grade.CRITICAL
        elif "requests" in missing:
            score.grade = Grade.WARNING
        else:
            score.grade = Grade.ALL_OK
        return score

    return check


def _requests_equal_limits(pod_template: Mapping[str, Any], resource: str) -> TestScore:
    summary = f"{_RESOURCE_LABELS[resource]} requests does not match limits"
    description = f"{_EQUAL_REASON} Set resources.requests.{resource} == resources.limits.{resource}"

    def inspect(container: Container) -> Iterator[Finding]:
        if _resource(container, "requests", resource) != _resource(container, "limits", resource):
            yield Grade.CRITICAL, summary, description

    return _evaluate(pod_template, inspect)


def container_cpu_requests_equal_limits(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Containers should request exactly the CPU they are limited to."""
    return _requests_equal_limits(pod_template, "cpu")


def container_memory_requests_equal_limits(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Containers should request exactly the memory they are limited to."""
    return _requests_equal_limits(pod_template, "memory")


def container_resource_requests_equal_limits(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Combine the CPU and memory requests-equal-limits checks."""
    score = TestScore(grade=Grade.ALL_OK)
    for partial in (
        container_cpu_requests_equal_limits(pod_template, type_meta),
        container_memory_requests_equal_limits(pod_template, type_meta),
    ):
        if partial.grade == Grade.CRITICAL:
            score.grade = Grade.CRITICAL
            score.comments.extend(partial.comments)
    return score


def container_tag(image: str) -> str:
    """Return the image tag, or an empty string if the image has none."""
    parts = image.split(":")
    return parts[-1] if len(parts) > 1 else ""


def _latest_tag_findings(container: Container) -> Iterator[Finding]:
    if _image_tag(container) in _UNPINNED_TAGS:
        yield Grade.CRITICAL, "Image with latest tag", "Using a fixed tag is recommended to avoid accidental upgrades"


def container_image_tag(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """No container should use an untagged or ``latest`` image."""
    return _evaluate(pod_template, _latest_tag_findings)


def _pull_policy_findings(container: Container) -> Iterator[Finding]:
    policy = container.get("imagePullPolicy") or ""
    # Kubernetes already defaults to Always for untagged and latest images.
    if policy == "Always" or (not policy and _image_tag(container) in _UNPINNED_TAGS):
        return
    yield (
        Grade.CRITICAL,
        "ImagePullPolicy is not set to Always",
        "It's recommended to always set the ImagePullPolicy to Always, to make sure that the "
        "imagePullSecrets are always correct, and to always get the image you want.",
    )


def container_image_pull_policy(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Containers should set imagePullPolicy to Always."""
    return _evaluate(pod_template, _pull_policy_findings)


def _ephemeral_presence_findings(container: Container) -> Iterator[Finding]:
    if _resource(container, "limits", "ephemeral-storage") == 0:
        yield (
            Grade.CRITICAL,
            "Ephemeral Storage limit is not set",
            "Resource limits are recommended to avoid resource DDOS. Set resources.limits.ephemeral-storage",
        )
    elif _resource(container, "requests", "ephemeral-storage") == 0:
        yield (
            Grade.WARNING,
            "Ephemeral Storage request is not set",
            "Resource requests are recommended to make sure the application can start and run without "
            "crashing. Set resource.requests.ephemeral-storage",
        )


def container_storage_ephemeral_request_and_limit(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Containers should set ephemeral-storage requests and limits."""
    return _evaluate(pod_template, _ephemeral_presence_findings)


def _ephemeral_equality_findings(container: Container) -> Iterator[Finding]:
    limit = _resource(container, "limits", "ephemeral-storage")
    request = _resource(container, "requests", "ephemeral-storage")
    if limit != 0 and request != 0 and limit != request:
        yield (
            Grade.CRITICAL,
            "Ephemeral Storage request does not match limit",
            "Having equal requests and limits is recommended to avoid node resource DDOS during spikes",
        )


def container_storage_ephemeral_request_equals_limit(
    pod_template: Mapping[str, Any], type_meta: Any = None
) -> TestScore:
    """Where both are set, ephemeral-storage requests should equal limits."""
    return _evaluate(pod_template, _ephemeral_equality_findings)


def _port_findings(container: Container) -> Iterator[Finding]:
    seen: set[str] = set()
    for port in container.get("ports") or []:
        port_name = port.get("name") or ""
        if port_name in seen:
            yield Grade.CRITICAL, "Container Port Check", "Container ports.containerPort named ports must be unique"
        elif port_name:
            seen.add(port_name)
        if len(port_name) > _MAX_PORT_NAME_LENGTH:
            yield Grade.CRITICAL, "Container Port Check", "Container port.Name length exceeds maximum permitted characters"
        if not port.get("containerPort"):
            yield Grade.CRITICAL, "Container Port Check", "Container ports.containerPort cannot be empty"


def container_ports_check(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """Container ports need a number and short, unique names."""
    return _evaluate(pod_template, _port_findings)


def _duplicate_env_findings(container: Container) -> Iterator[Finding]:
    seen: set[str] = set()
    for env in container.get("env") or []:
        key = env.get("name") or ""
        if key in seen:
            yield (
                Grade.CRITICAL,
                "Environment Variable Key Duplication",
                f"Container environment variable key '{key}' is duplicated",
            )
        else:
            seen.add(key)


def environment_variable_key_duplication(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """No container may define the same environment variable twice."""
    return _evaluate(pod_template, _duplicate_env_findings)