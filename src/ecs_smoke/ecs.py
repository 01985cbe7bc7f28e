"""
ECS task definition gateway.

Reads task definitions straight from the ECS API with boto3. The smoke
suites assert against Terraform outputs; this gateway lets a run confirm
what ECS actually registered and find task definitions left behind by a
failed teardown.
"""

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ecs_smoke.container_definitions import ContainerDefinition
from ecs_smoke.exceptions import ContainerDefinitionDecodeError, EcsGatewayError


logger = logging.getLogger(__name__)


class EcsTaskDefinitionGateway:
    """
    Read-only access to ECS task definitions.

    Uses a boto3 ECS client, injectable for tests.
    """

    def __init__(self, ecs_client: Any = None, region: str | None = None):
        """
        Initialize the gateway.

        Args:
            ecs_client: Optional boto3 ECS client (for testing).
                        If None, creates a new client with timeout configuration.
            region: AWS region for the client created when ecs_client is None
        """
        if ecs_client is None:
            config = Config(
                connect_timeout=5,
                read_timeout=60,
                retries={"max_attempts": 3, "mode": "standard"},
            )
            ecs_client = boto3.client("ecs", region_name=region, config=config)

        self._ecs_client = ecs_client

    def describe_container_definitions(self, task_definition_arn: str) -> list[ContainerDefinition]:
        """
        Get the container definitions registered for a task definition.

        Args:
            task_definition_arn: Task definition ARN or ``family:revision``

        Returns:
            Container definitions in registration order

        Raises:
            EcsGatewayError: If the task definition cannot be described or
                its containers do not match the expected schema
        """
        try:
            response = self._ecs_client.describe_task_definition(taskDefinition=task_definition_arn)
        except (ClientError, BotoCoreError) as e:
            raise EcsGatewayError(f"Failed to describe task definition {task_definition_arn}: {e}") from e

        container_definitions = response.get("taskDefinition", {}).get("containerDefinitions", [])

        try:
            return [ContainerDefinition.from_dict(item) for item in container_definitions]
        except ContainerDefinitionDecodeError as e:
            raise EcsGatewayError(f"Task definition {task_definition_arn} has an invalid container: {e}") from e

    def list_active_task_definitions(self, family_prefix: str) -> list[str]:
        """
        List ACTIVE task definition ARNs whose family starts with ``family_prefix``.

        ``ListTaskDefinitions`` only matches a full family name, so matching
        families are listed first and their revisions read one family at a time.

        Raises:
            EcsGatewayError: If the ECS API call fails
        """
        arns = []
        try:
            families_paginator = self._ecs_client.get_paginator("list_task_definition_families")
            families = [
                family
                for page in families_paginator.paginate(familyPrefix=family_prefix, status="ACTIVE")
                for family in page.get("families", [])
            ]

            revisions_paginator = self._ecs_client.get_paginator("list_task_definitions")
            for family in families:
                for page in revisions_paginator.paginate(familyPrefix=family, status="ACTIVE"):
                    arns.extend(page.get("taskDefinitionArns", []))
        except (ClientError, BotoCoreError) as e:
            raise EcsGatewayError(f"Failed to list task definitions for prefix {family_prefix}: {e}") from e

        logger.info(
            "Listed active task definitions",
            extra={"family_prefix": family_prefix, "families": len(families), "count": len(arns)},
        )
        return arns
