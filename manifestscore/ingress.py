"""Checks for Ingress objects."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, NamedTuple

from manifestscore.scorecard import Grade, TestScore


class _ServiceBackend(NamedTuple):
    name: str
    port_number: int
    port_name: str


def _service_backend(backend: Mapping[str, Any] | None) -> _ServiceBackend | None:
    """Read a path backend in either the current or the legacy Ingress form."""
    if not backend:
        return None
    service = backend.get("service")
    if service is not None:
        port = service.get("port") or {}
        return _ServiceBackend(
            name=service.get("name", "") or "",
            port_number=int(port.get("number") or 0),
            port_name=port.get("name", "") or "",
        )
    if "serviceName" in backend:
        port = backend.get("servicePort")
        name = backend.get("serviceName") or ""
        if isinstance(port, int):
            return _ServiceBackend(name, port, "")
        return _ServiceBackend(name, 0, str(port or ""))
    return None


def _namespace(obj: Mapping[str, Any]) -> str:
    return (obj.get("metadata") or {}).get("namespace", "") or ""


def ingress_targets_service_common(
    ingress: Mapping[str, Any], all_services: Iterable[Mapping[str, Any]] | None
) -> TestScore:
    """Check that every HTTP path of an Ingress routes to an existing Service port."""
    services = list(all_services or [])
    namespace = _namespace(ingress)
    score = TestScore()
    all_rules_have_matches = True

    for rule in (ingress.get("spec") or {}).get("rules") or []:
        http = rule.get("http")
        if http is None:
            continue

        for path in http.get("paths") or []:
            backend = _service_backend(path.get("backend"))
            path_has_match = False

            for service in services:
                if _namespace(service) != namespace or backend is None:
                    continue
                if (service.get("metadata") or {}).get("name", "") != backend.name:
                    continue
                for port in (service.get("spec") or {}).get("ports") or []:
                    if backend.port_number > 0 and port.get("port") == backend.port_number:
                        path_has_match = True
                    elif (port.get("name", "") or "") == backend.port_name:
                        path_has_match = True

            if path_has_match:
                continue

            all_rules_have_matches = False
            location = path.get("path", "") or ""
            if backend is None:
                score.add_comment(location, "No service match was found", "")
            elif backend.port_number > 0:
                score.add_comment(
                    location,
                    "No service match was found",
                    f"No service with name {backend.name} and port number "
                    f"{backend.port_number} was found",
                )
            else:
                score.add_comment(
                    location,
                    "No service match was found",
                    f"No service with name {backend.name} and port named "
                    f"{backend.port_name} was found",
                )

    score.grade = Grade.ALL_OK if all_rules_have_matches else Grade.CRITICAL
    return score


def ingress_targets_service(
    all_services: Iterable[Mapping[str, Any]] | None,
) -> Callable[[Mapping[str, Any]], TestScore]:
    """Build the Ingress check against a fixed set of Services."""
    services = list(all_services or [])

    def check(ingress: Mapping[str, Any]) -> TestScore:
        return ingress_targets_service_common(ingress, services)

    return check