"""
Smoke suite lifecycle.

A suite provisions one Terraform root module, lets a group of test cases
read its outputs, and destroys it afterwards. ``SmokeSuite.provisioned``
is what the pytest fixtures use:

    with SmokeSuite.from_config("ecs_fargate", config).provisioned() as ctx:
        ctx.terraform.output_map("ust-docker-labels")
"""

import logging
import warnings
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from ecs_smoke.config import SmokeTestConfig
from ecs_smoke.exceptions import (
    LeakedInfrastructureWarning,
    TerraformApplyError,
    TerraformDestroyError,
)
from ecs_smoke.terraform import Terraform, TerraformOptions

logger = logging.getLogger(__name__)


def ecs_ec2_options(config: SmokeTestConfig) -> TerraformOptions:
    """Terraform options for the ECS EC2 launch type suite."""
    return TerraformOptions(
        terraform_dir=config.terraform_dir("ecs_ec2"),
        terraform_binary=config.terraform_binary,
        vars={
            "dd_api_key": config.dd_api_key,
            "dd_site": config.dd_site,
            "test_prefix": config.test_prefix,
        },
        retryable_errors={
            "couldn't find resource": (
                "terratest could not find the resource. check for access denied errors in cloudtrail"
            ),
        },
    )


def ecs_fargate_options(config: SmokeTestConfig) -> TerraformOptions:
    """Terraform options for the ECS Fargate launch type suite."""
    return TerraformOptions(
        terraform_dir=config.terraform_dir("ecs_fargate"),
        terraform_binary=config.terraform_binary,
        vars={
            "dd_api_key": config.dd_api_key,
            "dd_service": "test-service",
            "dd_site": config.dd_site,
            "test_prefix": config.test_prefix,
        },
        retryable_errors={
            "couldn't find resource": "ECS eventually consistent or task definition not yet propagated",
        },
        no_color=True,
        max_retries=2,
        time_between_retries=10,
        lock=True,
    )


SUITES: dict[str, Callable[[SmokeTestConfig], TerraformOptions]] = {
    "ecs_ec2": ecs_ec2_options,
    "ecs_fargate": ecs_fargate_options,
}


@dataclass(frozen=True)
class SuiteContext:
    """
    Read-only state shared by every test case of a provisioned suite.

    Attributes:
        name: Suite name, used in log messages
        test_prefix: Prefix every provisioned resource is named with
        options: The configuration bundle the infrastructure was applied with
        terraform: Runner bound to the suite's root module, for reading outputs
    """

    name: str
    test_prefix: str
    options: TerraformOptions
    terraform: Terraform

    def prefixed(self, suffix: str) -> str:
        """Return the resource name ``<prefix>-<suffix>``."""
        return f"{self.test_prefix}-{suffix}"


class SmokeSuite:
    """
    Provisions and destroys the infrastructure of one smoke suite.

    Examples
    --------
    >>> config = SmokeTestConfig.from_env()
    >>> suite = SmokeSuite.from_config("ecs_ec2", config)
    >>> context = suite.setup()
    >>> context.terraform.output("bridge_mode_network_mode")
    'bridge'
    >>> suite.teardown()
    True
    """

    def __init__(self, name: str, options: TerraformOptions, test_prefix: str, terraform: Terraform | None = None):
        self.name = name
        self.options = options
        self.test_prefix = test_prefix
        self.terraform = terraform or Terraform(options)

    @classmethod
    def from_config(cls, name: str, config: SmokeTestConfig) -> "SmokeSuite":
        """
        Build a registered suite from the run configuration.

        Raises
        ------
        KeyError
            If no suite is registered under ``name``
        """
        if name not in SUITES:
            raise KeyError(f"Unknown smoke suite: {name}. Available suites: {', '.join(sorted(SUITES))}")
        return cls(name, SUITES[name](config), config.test_prefix)

    def setup(self) -> SuiteContext:
        """
        Run ``terraform init`` and ``apply`` for the suite.

        Raises
        ------
        TerraformApplyError
            If apply does not succeed within the retry budget
        """
        logger.info(
            f"Setting up {self.name} test suite resources...",
            extra={"suite": self.name, "test_prefix": self.test_prefix},
        )

        try:
            self.terraform.init_and_apply()
        except TerraformApplyError as e:
            logger.error(
                f"Failed to set up {self.name} test suite",
                extra={"suite": self.name, "error": str(e)},
            )
            raise

        return SuiteContext(
            name=self.name,
            test_prefix=self.test_prefix,
            options=self.options,
            terraform=self.terraform,
        )

    def teardown(self) -> bool:
        """
        Run ``terraform destroy`` for the suite.

        A failed destroy is logged and re-emitted as a
        ``LeakedInfrastructureWarning`` instead of being raised, so that
        test cases which already passed keep their result.

        Returns
        -------
        bool
            True if destroy succeeded
        """
        logger.info(
            f"Tearing down {self.name} test suite resources...",
            extra={"suite": self.name, "test_prefix": self.test_prefix},
        )

        try:
            self.terraform.destroy()
        except TerraformDestroyError as e:
            message = (
                f"Failed to destroy {self.name} test suite resources; resources prefixed "
                f"'{self.test_prefix}' may still be running: {e}"
            )
            logger.error(message, extra={"suite": self.name, "test_prefix": self.test_prefix})
            warnings.warn(message, LeakedInfrastructureWarning, stacklevel=2)
            return False

        return True

    @contextmanager
    def provisioned(self) -> Iterator[SuiteContext]:
        """Set the suite up, yield its context, and always tear it down."""
        try:
            yield self.setup()
        finally:
            self.teardown()
