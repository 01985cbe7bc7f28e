"""
ECS smoke tests package.

This package provisions the Terraform smoke test suites for the Datadog
ECS modules and provides the helpers their test cases assert with.
"""

from ecs_smoke.config import SmokeTestConfig
from ecs_smoke.container_definitions import ContainerDefinition, decode_container_definitions, get_container
from ecs_smoke.suite import SmokeSuite, SuiteContext
from ecs_smoke.terraform import Terraform, TerraformOptions


__all__ = [
    "SmokeTestConfig",
    "ContainerDefinition",
    "decode_container_definitions",
    "get_container",
    "SmokeSuite",
    "SuiteContext",
    "Terraform",
    "TerraformOptions",
]

__version__ = "1.0.0"
