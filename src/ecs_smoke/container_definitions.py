"""
ECS container definitions.

Terraform emits a task definition's containers as the JSON array ECS
stores (``container_definitions``). This module decodes that array into
immutable ``ContainerDefinition`` values and looks containers up by name.
"""

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from ecs_smoke.exceptions import ContainerDefinitionDecodeError


def _string_mapping(value: Any, what: str, container_name: str) -> Mapping[str, str]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, dict):
        raise ContainerDefinitionDecodeError(
            f"Container '{container_name}': {what} must be an object, got {type(value).__name__}"
        )
    for key, item in value.items():
        if not isinstance(item, str):
            raise ContainerDefinitionDecodeError(
                f"Container '{container_name}': {what} value for '{key}' must be a string, "
                f"got {type(item).__name__}"
            )
    return MappingProxyType(dict(value))


def _environment_mapping(value: Any, container_name: str) -> Mapping[str, str]:
    if value is None:
        return MappingProxyType({})
    if not isinstance(value, list):
        raise ContainerDefinitionDecodeError(
            f"Container '{container_name}': environment must be an array, got {type(value).__name__}"
        )
    environment = {}
    for entry in value:
        if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
            raise ContainerDefinitionDecodeError(
                f"Container '{container_name}': environment entries need a string 'name'"
            )
        item = entry.get("value", "")
        if not isinstance(item, str):
            raise ContainerDefinitionDecodeError(
                f"Container '{container_name}': environment value for '{entry['name']}' must be a string, "
                f"got {type(item).__name__}"
            )
        environment[entry["name"]] = item
    return MappingProxyType(environment)


@dataclass(frozen=True)
class ContainerDefinition:
    """
    One container of an ECS task definition.

    Attributes:
        name: Container name, unique within a task definition
        image: Image reference, or None when the definition omits it
        docker_labels: Docker label key -> value
        essential: Whether the task stops when this container stops
        environment: Environment variable name -> value
        raw: The decoded JSON object the definition was built from
    """

    name: str
    image: str | None = None
    docker_labels: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    essential: bool | None = None
    environment: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    raw: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}), repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: Any) -> "ContainerDefinition":
        """
        Build a container definition from one ECS container object.

        The object uses the ECS API field names (``name``, ``image``,
        ``dockerLabels``, ``essential``, ``environment``); both the
        Terraform output and ``DescribeTaskDefinition`` use this shape.

        Raises:
            ContainerDefinitionDecodeError: If the object does not match the schema
        """
        if not isinstance(data, dict):
            raise ContainerDefinitionDecodeError(
                f"Container definition must be an object, got {type(data).__name__}"
            )

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ContainerDefinitionDecodeError("Container definition is missing a string 'name'")

        image = data.get("image")
        if image is not None and not isinstance(image, str):
            raise ContainerDefinitionDecodeError(f"Container '{name}': image must be a string")

        essential = data.get("essential")
        if essential is not None and not isinstance(essential, bool):
            raise ContainerDefinitionDecodeError(f"Container '{name}': essential must be a boolean")

        return cls(
            name=name,
            image=image,
            docker_labels=_string_mapping(data.get("dockerLabels"), "dockerLabels", name),
            essential=essential,
            environment=_environment_mapping(data.get("environment"), name),
            raw=MappingProxyType(dict(data)),
        )


def decode_container_definitions(payload: str) -> list[ContainerDefinition]:
    """
    Decode a ``container_definitions`` JSON array.

    Args:
        payload: JSON text as emitted by Terraform

    Returns:
        Container definitions in their original order

    Raises:
        ContainerDefinitionDecodeError: If the payload is not a JSON array of
            container objects

    Example:
        >>> containers = decode_container_definitions('[{"name": "test-app", "image": "nginx:latest"}]')
        >>> containers[0].image
        'nginx:latest'
    """
    try:
        data = json.loads(payload)
    except (TypeError, json.JSONDecodeError) as e:
        raise ContainerDefinitionDecodeError(f"Failed to parse container definitions: {e}") from e

    if not isinstance(data, list):
        raise ContainerDefinitionDecodeError(
            f"Container definitions must be a JSON array, got {type(data).__name__}"
        )

    return [ContainerDefinition.from_dict(item) for item in data]


def get_container(
    containers: Iterable[ContainerDefinition], name: str
) -> tuple[ContainerDefinition | None, bool]:
    """
    Find the first container with the given name.

    A missing container is an expected outcome, reported through the flag
    rather than an exception.

    Returns:
        ``(container, True)`` when found, otherwise ``(None, False)``
    """
    for container in containers:
        if container.name == name:
            return container, True
    return None, False
