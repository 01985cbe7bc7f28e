"""
Fixtures for the Terraform smoke suites.

Each suite fixture is session-scoped: the suite's infrastructure is
applied once, before its first test case, and destroyed after the last
one whether or not the cases passed. A failed apply errors every case of
that suite without running it.
"""

from typing import Callable

import pytest

from ecs_smoke.config import SmokeTestConfig
from ecs_smoke.container_definitions import ContainerDefinition, decode_container_definitions
from ecs_smoke.suite import SmokeSuite, SuiteContext


@pytest.fixture(scope="session")
def smoke_config() -> SmokeTestConfig:
    """Configuration shared by every suite of this run."""
    return SmokeTestConfig.from_env()


@pytest.fixture(scope="session")
def ecs_ec2_suite(smoke_config: SmokeTestConfig):
    """Provision the ECS EC2 suite for the duration of the session."""
    with SmokeSuite.from_config("ecs_ec2", smoke_config).provisioned() as context:
        yield context


@pytest.fixture(scope="session")
def ecs_fargate_suite(smoke_config: SmokeTestConfig):
    """Provision the ECS Fargate suite for the duration of the session."""
    with SmokeSuite.from_config("ecs_fargate", smoke_config).provisioned() as context:
        yield context


@pytest.fixture(scope="session")
def load_task_output() -> Callable[[SuiteContext, str], tuple[dict[str, str], list[ContainerDefinition]]]:
    """Factory reading a task definition map output and decoding its containers."""

    def _load_task_output(context: SuiteContext, output_name: str) -> tuple[dict[str, str], list[ContainerDefinition]]:
        task = context.terraform.output_map(output_name)
        assert "container_definitions" in task, f"Output {output_name} has no container_definitions"
        return task, decode_container_definitions(task["container_definitions"])

    return _load_task_output
