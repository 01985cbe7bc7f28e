"""
Assertion helpers for task definition outputs.

Each ``*_mismatches`` function returns one message per discrepancy so a
single failed assertion reports everything that is wrong at once; the
matching ``assert_*`` function raises ``AssertionError`` with all of them.
"""

from typing import Mapping

from ecs_smoke.arn import parse_role_arn
from ecs_smoke.container_definitions import ContainerDefinition


def _raise_if_any(subject: str, mismatches: list[str]) -> None:
    if mismatches:
        details = "\n".join(f"  - {mismatch}" for mismatch in mismatches)
        raise AssertionError(f"{subject}:\n{details}")


def docker_label_mismatches(
    container: ContainerDefinition, expected_labels: Mapping[str, str]
) -> list[str]:
    """
    Compare a container's Docker labels against the expected ones.

    Labels on the container that are not expected are ignored.
    """
    mismatches = []
    for key, expected_value in expected_labels.items():
        if key not in container.docker_labels:
            mismatches.append(f"label {key!r} missing, expected {expected_value!r}")
            continue
        actual_value = container.docker_labels[key]
        if actual_value != expected_value:
            mismatches.append(f"label {key!r} is {actual_value!r}, expected {expected_value!r}")
    return mismatches


def assert_docker_labels(container: ContainerDefinition, expected_labels: Mapping[str, str]) -> None:
    """Assert every expected Docker label is present with its exact value."""
    _raise_if_any(
        f"Container {container.name!r} has unexpected docker labels",
        docker_label_mismatches(container, expected_labels),
    )


def role_arn_segments(arn: str) -> list[str]:
    """Split a role ARN on ``/``; a role at the default path yields two segments."""
    return arn.split("/")


def role_arn_without_path_mismatches(arn: str, role_name: str) -> list[str]:
    """Check a role ARN has no explicit path and names ``role_name``."""
    if not arn:
        return ["role ARN is empty"]

    mismatches = []
    segments = role_arn_segments(arn)
    if len(segments) != 2:
        mismatches.append(
            f"{arn!r} splits into {len(segments)} segments on '/', expected 2 for a role without a path"
        )
    if role_name not in segments[-1]:
        mismatches.append(f"role name segment {segments[-1]!r} does not contain {role_name!r}")
    return mismatches


def assert_role_arn_without_path(arn: str, role_name: str) -> None:
    _raise_if_any("Role ARN without path is malformed", role_arn_without_path_mismatches(arn, role_name))


def role_arn_with_path_mismatches(arn: str, path: str, role_name: str) -> list[str]:
    """Check a role ARN contains both the explicit ``path`` and ``role_name``."""
    if not arn:
        return ["role ARN is empty"]

    mismatches = []
    if path not in arn:
        mismatches.append(f"{arn!r} does not contain path {path!r}")
    if role_name not in arn:
        mismatches.append(f"{arn!r} does not contain role name {role_name!r}")

    try:
        role_arn = parse_role_arn(arn)
    except ValueError as e:
        mismatches.append(str(e))
        return mismatches

    if not role_arn.has_explicit_path:
        mismatches.append(f"{arn!r} has no path segment between 'role/' and the role name")
    return mismatches


def assert_role_arn_with_path(arn: str, path: str, role_name: str) -> None:
    _raise_if_any("Role ARN with path is malformed", role_arn_with_path_mismatches(arn, path, role_name))


def named_with_prefix_mismatches(value: str, prefixed_name: str, what: str = "Resource name") -> list[str]:
    if not value:
        return [f"{what} should not be empty"]
    if prefixed_name not in value:
        return [f"{what} {value!r} does not contain {prefixed_name!r}"]
    return []


def assert_named_with_prefix(value: str, prefixed_name: str, what: str = "Resource name") -> None:
    """Assert a provisioned resource identifier carries its ``<prefix>-<suffix>`` name."""
    _raise_if_any(f"{what} is not named with the run prefix", named_with_prefix_mismatches(value, prefixed_name, what))
