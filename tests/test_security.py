from manifestscore.scorecard import Grade, TestScoreComment
from manifestscore.security import (
    SECCOMP_ANNOTATION,
    container_security_context_privileged,
    container_security_context_read_only_root_filesystem,
    container_security_context_user_group_id,
    pod_seccomp_profile,
)

NO_CONTEXT = TestScoreComment(
    path="foobar",
    summary="Container has no configured security context",
    description="Set securityContext to run the container in a more secure context.",
)


def _pod(container_context=None, pod_context=None, annotations=None):
    container = {"name": "foobar", "image": "foo:bar"}
    if container_context is not None:
        container["securityContext"] = container_context
    spec = {"containers": [container]}
    if pod_context is not None:
        spec["securityContext"] = pod_context
    metadata = {"name": "pod-name"}
    if annotations is not None:
        metadata["annotations"] = annotations
    return {"metadata": metadata, "spec": spec}


GOOD = {
    "privileged": False,
    "readOnlyRootFilesystem": True,
    "runAsUser": 30000,
    "runAsGroup": 30000,
}


def test_user_group_all_good():
    score = container_security_context_user_group_id(_pod(GOOD))
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_user_group_low_group():
    score = container_security_context_user_group_id(_pod({**GOOD, "runAsGroup": 3000}))
    assert score.grade == Grade.CRITICAL
    assert TestScoreComment(
        path="foobar",
        summary="The container running with a low group ID",
        description="A groupid above 10 000 is recommended to avoid conflicts with the host. Set securityContext.runAsGroup to a value > 10000",
    ) in score.comments


def test_user_group_low_user():
    score = container_security_context_user_group_id(_pod({**GOOD, "runAsUser": 3000}))
    assert score.grade == Grade.CRITICAL
    assert TestScoreComment(
        path="foobar",
        summary="The container is running with a low user ID",
        description="A userid above 10 000 is recommended to avoid conflicts with the host. Set securityContext.runAsUser to a value > 10000",
    ) in score.comments


def test_user_group_no_security_context():
    score = container_security_context_user_group_id(_pod())
    assert score.grade == Grade.CRITICAL
    assert NO_CONTEXT in score.comments


def test_user_group_inherits_pod_context():
    score = container_security_context_user_group_id(
        _pod(pod_context={"runAsUser": 20000, "runAsGroup": 20000})
    )
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_user_group_container_overrides_pod_context():
    score = container_security_context_user_group_id(
        _pod({"runAsUser": 100}, pod_context={"runAsUser": 20000, "runAsGroup": 20000})
    )
    assert score.grade == Grade.CRITICAL
    assert [c.summary for c in score.comments] == ["The container is running with a low user ID"]


def test_privileged_all_good():
    score = container_security_context_privileged(_pod(GOOD))
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_privileged_container():
    score = container_security_context_privileged(_pod({**GOOD, "privileged": True}))
    assert score.grade == Grade.CRITICAL
    assert TestScoreComment(
        path="foobar",
        summary="The container is privileged",
        description="Set securityContext.privileged to false. Privileged containers can access all devices on the host, and grants almost the same access as non-containerized processes on the host.",
    ) in score.comments


def test_privileged_without_context_is_ok():
    score = container_security_context_privileged(_pod())
    assert score.grade == Grade.ALL_OK


def test_read_only_root_all_good():
    score = container_security_context_read_only_root_filesystem(_pod(GOOD))
    assert score.grade == Grade.ALL_OK
    assert score.comments == []


def test_read_only_root_writeable():
    score = container_security_context_read_only_root_filesystem(
        _pod({**GOOD, "readOnlyRootFilesystem": False})
    )
    assert score.grade == Grade.CRITICAL
    assert TestScoreComment(
        path="foobar",
        summary="The pod has a container with a writable root filesystem",
        description="Set securityContext.readOnlyRootFilesystem to true",
    ) in score.comments


def test_read_only_root_no_security_context():
    score = container_security_context_read_only_root_filesystem(_pod())
    assert score.grade == Grade.CRITICAL
    assert NO_CONTEXT in score.comments


def test_seccomp_missing():
    score = pod_seccomp_profile(_pod(GOOD))
    assert score.grade == Grade.WARNING
    assert score.comments[0].path == "pod-name"


def test_seccomp_annotated():
    score = pod_seccomp_profile(_pod(GOOD, annotations={SECCOMP_ANNOTATION: "runtime/default"}))
    assert score.grade == Grade.ALL_OK
    assert score.comments == []