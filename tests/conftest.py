"""Shared test fixtures for secrets-injector tests."""

import pytest

from secrets_injector.main import create_app
from tests.factories import make_settings


@pytest.fixture
def deployment_app():
    app = create_app(make_settings("Deployment"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def pod_app():
    app = create_app(make_settings("Pod"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(deployment_app):
    return deployment_app.test_client()


@pytest.fixture
def pod_client(pod_app):
    return pod_app.test_client()
