"""
Pytest configuration and fixtures for ecs_smoke unit tests.
"""

import json
import logging

import pytest

from ecs_smoke.config import SmokeTestConfig


@pytest.fixture
def smoke_tests_dir(tmp_path):
    """Create a smoke_tests directory with one root module per suite."""
    smoke_tests = tmp_path / "smoke_tests"
    (smoke_tests / "ecs_ec2").mkdir(parents=True)
    (smoke_tests / "ecs_fargate").mkdir(parents=True)
    return smoke_tests


@pytest.fixture
def test_config(smoke_tests_dir):
    """Create a smoke test configuration for CI job 123."""
    return SmokeTestConfig(
        test_prefix="terraform-test-123",
        smoke_tests_dir=smoke_tests_dir,
        terraform_binary="terraform",
        dd_api_key="test-api-key",
        dd_site="datadoghq.com",
        aws_region="us-east-1",
    )


@pytest.fixture
def ust_container_definitions():
    """Container definitions JSON shaped like the ust-docker-labels output."""
    agent_labels = {
        "com.datadoghq.tags.service": "docker-agent-service",
        "com.datadoghq.tags.env": "agent-dev",
        "com.datadoghq.tags.version": "v1.2.3",
    }
    return json.dumps([
        {
            "name": "dummy-app",
            "image": "ghcr.io/datadog/apps-tracegen:main",
            "essential": True,
            "dockerLabels": {
                "com.datadoghq.tags.service": "ust-test-service",
                "com.datadoghq.tags.env": "ust-test-env",
                "com.datadoghq.tags.version": "1.2.3",
                "team": "containers",
            },
            "environment": [{"name": "DD_SERVICE", "value": "ust-test-service"}],
        },
        {"name": "datadog-agent", "image": "public.ecr.aws/datadog/agent:latest", "dockerLabels": agent_labels},
        {"name": "datadog-log-router", "image": "amazon/aws-for-fluent-bit:stable", "dockerLabels": agent_labels},
        {"name": "cws-instrumentation-init", "image": "datadog/cws-instrumentation:latest", "dockerLabels": agent_labels},
    ])


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers the CLI or logging tests attached to the package logger."""
    yield
    logger = logging.getLogger("ecs_smoke")
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
