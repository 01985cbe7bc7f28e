"""IAM role ARN parsing."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RoleArn:
    """
    An IAM role ARN split into its parts.

    ``arn:aws:iam::123456789012:role/test-path/my-role`` has the path
    ``/test-path/`` and the name ``my-role``. Roles created without a path
    get AWS's default path ``/``.
    """

    partition: str
    account_id: str
    path: str
    name: str

    @property
    def has_explicit_path(self) -> bool:
        return self.path != "/"

    def __str__(self) -> str:
        return f"arn:{self.partition}:iam::{self.account_id}:role{self.path}{self.name}"


def parse_role_arn(arn: str) -> RoleArn:
    """
    Parse an IAM role ARN.

    Raises:
        ValueError: If ``arn`` is not an IAM role ARN
    """
    parts = arn.split(":", 5)
    if len(parts) != 6 or parts[0] != "arn" or parts[2] != "iam":
        raise ValueError(f"Not an IAM ARN: {arn!r}")

    _, partition, _, _, account_id, resource = parts
    if not resource.startswith("role/"):
        raise ValueError(f"Not an IAM role ARN: {arn!r}")

    # resource is "role" + path + name, where path starts and ends with "/"
    path_and_name = resource[len("role"):]
    path, _, name = path_and_name.rpartition("/")
    if not name:
        raise ValueError(f"IAM role ARN has no role name: {arn!r}")

    return RoleArn(partition=partition, account_id=account_id, path=f"{path}/", name=name)
