"""Tests for mutate.py module."""

import base64
import json
import logging
from unittest.mock import patch

import pytest

from secrets_injector.mutate import Decision, Outcome, mutate
from secrets_injector.review import AdmissionRequest
from secrets_injector.workloads import DeploymentWorkload, PodWorkload
from tests.factories import make_deployment, make_pod, make_review


def request_for(obj, kind):
    group = "" if kind == "Pod" else "apps"
    return AdmissionRequest.model_validate(make_review(obj, kind=kind, group=group)["request"])


class TestMutate:
    """Tests for the admission decision."""

    def test_deployment_is_patched_under_pod_template(self):
        decision = mutate(request_for(make_deployment(), "Deployment"), DeploymentWorkload())

        assert decision.outcome is Outcome.ALLOWED
        patches = json.loads(decision.patch)
        assert [p["path"] for p in patches] == [
            "/spec/template/spec/volumes",
            "/spec/template/spec/initContainers",
            "/spec/template/spec/containers",
        ]

    def test_pod_is_patched_under_spec(self):
        decision = mutate(request_for(make_pod(), "Pod"), PodWorkload())

        assert decision.outcome is Outcome.ALLOWED
        assert [p["path"] for p in json.loads(decision.patch)] == [
            "/spec/volumes",
            "/spec/initContainers",
            "/spec/containers",
        ]

    @pytest.mark.parametrize("kind", ["Service", "ConfigMap", "StatefulSet"])
    def test_other_kinds_pass_through(self, kind):
        decision = mutate(request_for({"metadata": {"name": "x"}}, kind), DeploymentWorkload())

        assert decision == Decision.allowed()
        assert decision.patch is None
        assert decision.reason is None

    def test_pod_is_not_patched_by_deployment_webhook(self):
        decision = mutate(request_for(make_pod(), "Pod"), DeploymentWorkload())

        assert decision.patch is None

    @pytest.mark.parametrize(
        "obj",
        [
            "not-an-object",
            ["a", "list"],
            None,
            {"spec": {"template": {"spec": {"containers": "nginx"}}}},
            {"spec": {"template": {"spec": {"volumes": [{"emptyDir": {}}]}}}},
        ],
    )
    def test_malformed_object_is_errored(self, obj):
        decision = mutate(request_for(obj, "Deployment"), DeploymentWorkload())

        assert decision.outcome is Outcome.ERRORED
        assert decision.patch is None
        assert decision.reason

    def test_unencodable_patch_is_errored(self):
        with patch("secrets_injector.mutate.encode_patch", side_effect=TypeError("not serializable")):
            decision = mutate(request_for(make_deployment(), "Deployment"), DeploymentWorkload())

        assert decision == Decision.errored("not serializable")

    def test_skip_existing_is_passed_to_builder(self):
        deployment = make_deployment(
            volumes=[{"name": "secrets", "emptyDir": {"medium": "Memory"}}],
            init_containers=[{"name": "secrets-injector", "image": "busybox"}],
        )

        decision = mutate(request_for(deployment, "Deployment"), DeploymentWorkload(), skip_existing=True)

        assert [p["path"] for p in json.loads(decision.patch)] == ["/spec/template/spec/containers"]

    def test_request_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="secrets_injector.mutate"):
            mutate(request_for(make_deployment(), "Deployment"), DeploymentWorkload())

        assert "kind=Deployment" in caplog.text
        assert "uid=test-uid-123" in caplog.text
        assert "user=kubernetes-admin" in caplog.text
        assert "patch=" in caplog.text


class TestDecisionResponse:
    """Tests for mapping decisions onto AdmissionResponse."""

    def test_allowed_with_patch(self):
        response = Decision.allowed(b'[{"op": "add"}]').to_response(uid="abc")

        assert response.uid == "abc"
        assert response.allowed is True
        assert response.patch_type == "JSONPatch"
        assert base64.b64decode(response.patch) == b'[{"op": "add"}]'
        assert response.status is None

    def test_allowed_without_patch(self):
        response = Decision.allowed().to_response(uid="abc")

        assert response.allowed is True
        assert response.patch is None
        assert response.patch_type is None

    @pytest.mark.parametrize("decision", [Decision.errored("bad object"), Decision.denied("bad object")])
    def test_not_allowed_carries_reason(self, decision):
        response = decision.to_response(uid="abc")

        assert response.allowed is False
        assert response.patch is None
        assert response.status.message == "bad object"
