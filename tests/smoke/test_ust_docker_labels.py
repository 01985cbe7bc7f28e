"""
Smoke tests for Unified Service Tagging docker labels in the ECS Fargate suite.

When dd_service, dd_env and dd_version are set, the module propagates them
to every container definition as com.datadoghq.tags.* docker labels.
"""

import logging

import pytest

from ecs_smoke.assertions import docker_label_mismatches
from ecs_smoke.container_definitions import get_container

logger = logging.getLogger(__name__)

EXPECTED_UST_LABELS = {
    "com.datadoghq.tags.service": "ust-test-service",
    "com.datadoghq.tags.env": "ust-test-env",
    "com.datadoghq.tags.version": "1.2.3",
}

# The Datadog sidecars are configured with their own UST values, which
# overwrite the task-level ones.
DATADOG_CONTAINERS = ["datadog-agent", "datadog-log-router", "cws-instrumentation-init"]
EXPECTED_AGENT_UST_LABELS = {
    "com.datadoghq.tags.service": "docker-agent-service",
    "com.datadoghq.tags.env": "agent-dev",
    "com.datadoghq.tags.version": "v1.2.3",
}


@pytest.mark.smoke
class TestUSTDockerLabels:
    """Smoke tests against the ust-docker-labels output of smoke_tests/ecs_fargate."""

    def test_ust_docker_labels(self, ecs_fargate_suite, load_task_output):
        logger.info("TestUSTDockerLabels: Running test...")

        task, containers = load_task_output(ecs_fargate_suite, "ust-docker-labels")

        assert task["family"] == ecs_fargate_suite.prefixed("ust-docker-labels"), "Unexpected task family name"
        assert len(containers) == 4, "Expected 4 containers in the task definition (1 app container + 3 agent sidecar)"

        expected = {"dummy-app": EXPECTED_UST_LABELS}
        expected.update({name: EXPECTED_AGENT_UST_LABELS for name in DATADOG_CONTAINERS})

        # Collect every discrepancy before failing
        failures = []
        for container_name, expected_labels in expected.items():
            container, found = get_container(containers, container_name)
            if not found:
                failures.append(f"Container {container_name} not found in definitions")
                continue
            failures.extend(
                f"{container_name}: {mismatch}" for mismatch in docker_label_mismatches(container, expected_labels)
            )

        assert not failures, "UST docker labels mismatch:\n" + "\n".join(failures)
