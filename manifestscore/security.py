"""Checks on pod and container security settings."""

from __future__ import annotations

from typing import Any, Mapping

from manifestscore.scorecard import Grade, TestScore

SECCOMP_ANNOTATION = "seccomp.security.alpha.kubernetes.io/defaultProfileName"
_MIN_ID = 10000

_NO_CONTEXT_SUMMARY = "Container has no configured security context"
_NO_CONTEXT_DESCRIPTION = "Set securityContext to run the container in a more secure context."


def _spec(pod_template: Mapping[str, Any]) -> Mapping[str, Any]:
    return pod_template.get("spec") or {}


def _all_containers(pod_template: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    spec = _spec(pod_template)
    return [*(spec.get("initContainers") or []), *(spec.get("containers") or [])]


def _name(container: Mapping[str, Any]) -> str:
    return container.get("name", "") or ""


def container_security_context_read_only_root_filesystem(
    pod_template: Mapping[str, Any], type_meta: Any = None
) -> TestScore:
    """Containers should run with a read-only root filesystem."""
    score = TestScore()
    failed = False
    for container in _all_containers(pod_template):
        context = container.get("securityContext")
        if context is None:
            failed = True
            score.add_comment(_name(container), _NO_CONTEXT_SUMMARY, _NO_CONTEXT_DESCRIPTION)
            continue
        if not context.get("readOnlyRootFilesystem"):
            failed = True
            score.add_comment(
                _name(container),
                "The pod has a container with a writable root filesystem",
                "Set securityContext.readOnlyRootFilesystem to true",
            )
    score.grade = Grade.CRITICAL if failed else Grade.ALL_OK
    return score


def container_security_context_privileged(
    pod_template: Mapping[str, Any], type_meta: Any = None
) -> TestScore:
    """No container should be privileged."""
    score = TestScore()
    has_privileged = False
    for container in _all_containers(pod_template):
        context = container.get("securityContext")
        if context is not None and context.get("privileged"):
            has_privileged = True
            score.add_comment(
                _name(container),
                "The container is privileged",
                "Set securityContext.privileged to false. Privileged containers can access all "
                "devices on the host, and grants almost the same access as non-containerized "
                "processes on the host.",
            )
    score.grade = Grade.CRITICAL if has_privileged else Grade.ALL_OK
    return score


def container_security_context_user_group_id(
    pod_template: Mapping[str, Any], type_meta: Any = None
) -> TestScore:
    """Containers should run with user and group IDs of at least 10000."""
    score = TestScore()
    pod_context = _spec(pod_template).get("securityContext")
    failed = False

    for container in _all_containers(pod_template):
        name = _name(container)
        context = container.get("securityContext")
        if context is None and pod_context is None:
            failed = True
            score.add_comment(name, _NO_CONTEXT_SUMMARY, _NO_CONTEXT_DESCRIPTION)
            continue

        context = context or {}
        run_as_user = context.get("runAsUser")
        run_as_group = context.get("runAsGroup")
        # Pod-level values apply where the container leaves them unset.
        if pod_context is not None:
            if run_as_group is None:
                run_as_group = pod_context.get("runAsGroup")
            if run_as_user is None:
                run_as_user = pod_context.get("runAsUser")

        if run_as_user is None or run_as_user < _MIN_ID:
            failed = True
            score.add_comment(
                name,
                "The container is running with a low user ID",
                "A userid above 10 000 is recommended to avoid conflicts with the host. "
                "Set securityContext.runAsUser to a value > 10000",
            )
        if run_as_group is None or run_as_group < _MIN_ID:
            failed = True
            score.add_comment(
                name,
                "The container running with a low group ID",
                "A groupid above 10 000 is recommended to avoid conflicts with the host. "
                "Set securityContext.runAsGroup to a value > 10000",
            )

    score.grade = Grade.CRITICAL if failed else Grade.ALL_OK
    return score


def pod_seccomp_profile(pod_template: Mapping[str, Any], type_meta: Any = None) -> TestScore:
    """The pod should configure a default seccomp profile."""
    metadata = pod_template.get("metadata") or {}
    annotations = metadata.get("annotations") or {}
    score = TestScore()
    if SECCOMP_ANNOTATION in annotations:
        score.grade = Grade.ALL_OK
    else:
        score.grade = Grade.WARNING
        score.add_comment(
            metadata.get("name", "") or "",
            "The pod has not configured Seccomp for its containers",
            "Running containers with Seccomp is recommended to reduce the kernel attack surface",
        )
    return score