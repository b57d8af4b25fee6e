"""Builders for admission reviews and workload objects used across tests."""

import base64
import json

from secrets_injector.config import Settings


def make_settings(workload_kind="Deployment", skip_existing=False):
    return Settings(
        port=8443,
        cert_file="/tls/tls.crt",
        key_file="/tls/tls.key",
        workload_kind=workload_kind,
        skip_existing=skip_existing,
        log_level="INFO",
    )


def make_pod(volumes=None, containers=None, init_containers=None):
    """Build a Pod object with the given pod spec sections (omitted when None)."""
    spec = {}
    if volumes is not None:
        spec["volumes"] = volumes
    if init_containers is not None:
        spec["initContainers"] = init_containers
    spec["containers"] = containers if containers is not None else [{"name": "app", "image": "nginx"}]
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {"name": "web", "namespace": "default"},
        "spec": spec,
    }


def make_deployment(volumes=None, containers=None, init_containers=None):
    """Build a Deployment object whose pod template has the given sections."""
    pod = make_pod(volumes=volumes, containers=containers, init_containers=init_containers)
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": "web", "namespace": "default"},
        "spec": {
            "replicas": 1,
            "selector": {"matchLabels": {"app": "web"}},
            "template": {"metadata": {"labels": {"app": "web"}}, "spec": pod["spec"]},
        },
    }


def make_review(obj, kind="Deployment", uid="test-uid-123", group="apps"):
    return {
        "apiVersion": "admission.k8s.io/v1",
        "kind": "AdmissionReview",
        "request": {
            "uid": uid,
            "kind": {"group": group, "version": "v1", "kind": kind},
            "resource": {"group": group, "version": "v1", "resource": kind.lower() + "s"},
            "namespace": "default",
            "name": "web",
            "operation": "CREATE",
            "userInfo": {"username": "kubernetes-admin", "groups": ["system:masters"]},
            "object": obj,
        },
    }


def decode_patch(response):
    """Return the JSON Patch carried by an AdmissionReview response dict."""
    return json.loads(base64.b64decode(response["patch"]))
