"""Checks that grade Kubernetes object manifests, and a scorecard to collect the results."""

__version__ = "0.1.0"

__all__ = [
    "container",
    "cronjob",
    "disruptionbudget",
    "hpa",
    "ingress",
    "labels",
    "meta",
    "networkpolicy",
    "probes",
    "quantity",
    "scorecard",
    "security",
    "service",
    "stable",
]