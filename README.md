# manifestscore

Checks that grade Kubernetes objects against reliability and security
recommendations. Objects are plain Python mappings, as you get them from
loading a YAML or JSON manifest (`apiVersion`, `kind`, `metadata`, `spec`, ...).

Each check returns a `TestScore` (from `manifestscore.scorecard`) holding a
`Grade`, a `skipped` flag and a list of `TestScoreComment` entries
(`path`, `summary`, `description`, `documentation_url`) that explain what was
found.

## Installation

```
pip install manifestscore
```

The package has no dependencies outside the standard library.

## Grades

`Grade` is an integer enum; a higher value is better.

| Grade       | Value | `str()`  |
|-------------|-------|----------|
| `CRITICAL`  | 1     | CRITICAL |
| `WARNING`   | 5     | WARNING  |
| `ALMOST_OK` | 7     | OK       |
| `ALL_OK`    | 10    | OK       |

## Checks

Checks that work on a pod template take `(pod_template, type_meta)`, where
`pod_template` is a mapping with `metadata` and `spec`, and `type_meta` is a
mapping with `apiVersion` and `kind` of the object that holds the template.
Functions named as builders take the surrounding objects and return the check.

- `manifestscore.container`
  - `container_resources(require_cpu_limit, require_memory_limit)` builds a
    check for resource requests and limits.
  - `container_resource_requests_equal_limits`,
    `container_cpu_requests_equal_limits`,
    `container_memory_requests_equal_limits`
  - `container_image_tag`, `container_image_pull_policy`, `container_tag(image)`
  - `container_storage_ephemeral_request_and_limit`,
    `container_storage_ephemeral_request_equals_limit`
  - `container_ports_check`, `environment_variable_key_duplication`
- `manifestscore.security`: `container_security_context_read_only_root_filesystem`,
  `container_security_context_privileged`,
  `container_security_context_user_group_id`, `pod_seccomp_profile`.
- `manifestscore.probes`: `container_probes(all_services)` and
  `pod_is_targeted_by_service(pod, service)`. Jobs and CronJobs in the
  `batch` group always pass.
- `manifestscore.networkpolicy`: `pod_has_network_policy(all_netpols)` and
  `network_policy_targets_pod(pods, workloads)`.
- `manifestscore.service`: `service_targets_pod(pods, workloads)` and
  `service_type(service)` (warns on `NodePort`).
- `manifestscore.ingress`: `ingress_targets_service(all_services)` and
  `ingress_targets_service_common(ingress, all_services)`; both the
  `backend.service` form and the older `serviceName`/`servicePort` form are read.
- `manifestscore.disruptionbudget`: `stateful_set_has(budgets)`,
  `deployment_has(budgets)`, `has_matching(budgets, namespace, labels)` and
  `has_policy(pdb)`. Workloads with fewer than 2 replicas are marked skipped.
- `manifestscore.hpa`: `hpa_has_target(all_targetable_objs)`.
- `manifestscore.cronjob`: `cron_job_has_deadline(job)` and
  `cron_job_has_restart_policy(job)`.
- `manifestscore.meta`: `validate_label_values(meta)`.
- `manifestscore.stable`: `meta_stable_available(kubernetes_version)` warns
  about deprecated `apiVersion`/`kind` pairs whose replacement exists in the
  given `Semver(major, minor)`.

Helpers:

- `manifestscore.labels.selector_matches(selector, labels)` evaluates a
  LabelSelector (`matchLabels` and `matchExpressions` with `In`, `NotIn`,
  `Exists`, `DoesNotExist`). A missing selector matches nothing, an empty one
  matches everything, and a malformed one raises `LabelSelectorError`.
  `label_selector_matches_labels(selector_labels, labels)` does the same for a
  plain key/value selector and returns `False` for invalid ones.
- `manifestscore.quantity.parse_quantity(value)` turns a quantity such as
  `500m`, `256Mi` or `1e3` into an exact `Fraction`, raising `QuantityError`
  on bad input.

## Example

```python
from manifestscore.container import container_image_tag
from manifestscore.scorecard import Grade

pod_template = {
    "metadata": {"name": "web"},
    "spec": {"containers": [{"name": "web", "image": "nginx:latest"}]},
}

score = container_image_tag(pod_template, {"kind": "Pod", "apiVersion": "v1"})
assert score.grade is Grade.CRITICAL
print(score.comments[0].summary)  # Image with latest tag
```

## Collecting results and annotations

A `Scorecard` is a dict of `ScoredObject`s keyed by kind, apiVersion,
namespace and name. `Scorecard.new_object(manifest, ...)` returns the object
for a manifest, creating it the first time. `ScoredObject.add(score, check,
file_location, *annotation_maps)` records a result for a `Check(name, id,
comment, optional)`.

When the object was created with `use_ignore_checks_annotation=True`, a check
whose id is listed in the comma separated `kube-score/ignore` annotation is
recorded as skipped. With `use_optional_checks_annotation=True`, the
`kube-score/enable` annotation turns optional checks on; optional checks are
otherwise recorded as skipped. A second annotation map (for example the pod
template's) is consulted before the first.

```python
from manifestscore.scorecard import Check, FileLocation, Grade, Scorecard
from manifestscore.service import service_type

svc = {
    "apiVersion": "v1",
    "kind": "Service",
    "metadata": {"name": "web", "annotations": {"kube-score/ignore": "service-type"}},
    "spec": {"type": "NodePort"},
}

card = Scorecard()
obj = card.new_object(svc, use_ignore_checks_annotation=True)
result = obj.add(service_type(svc), Check(name="Service Type", id="service-type"),
                 FileLocation("service.yaml", 1), svc["metadata"]["annotations"])
assert result.skipped
assert not card.any_below_or_equal_to_grade(Grade.WARNING)
```

## What this package does not do

It has no command-line program, does not read or parse manifest files, and
has no registry that runs every check over a set of objects. You load the
manifests yourself, call the checks you want, and collect their results in a
`Scorecard` if you need to.

## Running the tests

```
pip install -e ".[test]"
pytest
```