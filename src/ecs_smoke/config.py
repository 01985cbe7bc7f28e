"""
Configuration management for the ECS smoke tests.

This module provides a configuration dataclass that loads settings from
environment variables (optionally seeded from a .env file) with defaults
matching the CI pipeline.
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from ecs_smoke.exceptions import ConfigurationError


BASE_TEST_PREFIX = "terraform-test"

DEFAULT_SMOKE_TESTS_DIR = Path(__file__).resolve().parents[2] / "smoke_tests"

DATADOG_SITES = (
    "datadoghq.com",
    "us3.datadoghq.com",
    "us5.datadoghq.com",
    "datadoghq.eu",
    "ap1.datadoghq.com",
    "ap2.datadoghq.com",
    "ddog-gov.com",
)


def load_dotenv_if_exists(dotenv_path: str = ".env") -> None:
    """Load environment variables from a .env file if it exists.

    Existing environment variables take precedence over values in the file.

    Args:
        dotenv_path: Path to the .env file. Defaults to ".env" in current directory.
    """
    load_dotenv(dotenv_path=dotenv_path, override=False)


def build_test_prefix(ci_job_id: str | None = None) -> str:
    """
    Build the prefix every provisioned resource is named with.

    Parameters
    ----------
    ci_job_id : str | None
        CI job identifier; appended when set and non-empty

    Returns
    -------
    str
        The resource name prefix

    Examples
    --------
    >>> build_test_prefix()
    'terraform-test'
    >>> build_test_prefix("123456")
    'terraform-test-123456'
    """
    if ci_job_id:
        return f"{BASE_TEST_PREFIX}-{ci_job_id}"
    return BASE_TEST_PREFIX


@dataclass(frozen=True)
class SmokeTestConfig:
    """
    Configuration for a smoke test run.

    This configuration is typically loaded from environment variables
    but can also be constructed directly for testing.

    Attributes
    ----------
    test_prefix : str
        Resource name prefix shared by every suite in this run
    smoke_tests_dir : Path
        Directory holding one Terraform root module per suite
    terraform_binary : str
        Name or path of the Terraform executable
    dd_api_key : str
        Datadog API key passed to the modules under test
    dd_site : str
        Datadog site passed to the modules under test
    aws_region : str
        AWS region used for ECS API lookups
    """

    test_prefix: str
    smoke_tests_dir: Path = DEFAULT_SMOKE_TESTS_DIR
    terraform_binary: str = "terraform"
    dd_api_key: str = "test-api-key"
    dd_site: str = "datadoghq.com"
    aws_region: str = "us-east-1"

    @classmethod
    def from_env(cls, dotenv_path: str | None = ".env") -> "SmokeTestConfig":
        """
        Load configuration from environment variables.

        Parameters
        ----------
        dotenv_path : str | None
            .env file to seed the environment from; None skips it

        Returns
        -------
        SmokeTestConfig
            Configuration loaded from environment

        Raises
        ------
        ConfigurationError
            If SMOKE_TESTS_DIR is set but empty
        """
        if dotenv_path is not None:
            load_dotenv_if_exists(dotenv_path)

        smoke_tests_dir = DEFAULT_SMOKE_TESTS_DIR
        smoke_tests_dir_str = os.getenv("SMOKE_TESTS_DIR")
        if smoke_tests_dir_str is not None:
            if not smoke_tests_dir_str.strip():
                raise ConfigurationError("SMOKE_TESTS_DIR is set but empty")
            smoke_tests_dir = Path(smoke_tests_dir_str)

        return cls(
            test_prefix=build_test_prefix(os.getenv("CI_JOB_ID")),
            smoke_tests_dir=smoke_tests_dir,
            terraform_binary=os.getenv("TERRAFORM_BINARY", "terraform"),
            dd_api_key=os.getenv("DD_API_KEY", "test-api-key"),
            dd_site=os.getenv("DD_SITE", "datadoghq.com"),
            aws_region=os.getenv("AWS_REGION", "us-east-1"),
        )

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of error messages.

        Returns
        -------
        list[str]
            List of validation errors (empty if valid)
        """
        errors = []

        if not self.smoke_tests_dir.is_dir():
            errors.append(f"Smoke tests directory does not exist: {self.smoke_tests_dir}")

        if shutil.which(self.terraform_binary) is None:
            errors.append(f"Terraform binary not found on PATH: {self.terraform_binary}")

        if self.dd_site not in DATADOG_SITES:
            errors.append(f"Unknown Datadog site: {self.dd_site}")

        if not self.test_prefix.startswith(BASE_TEST_PREFIX):
            errors.append(f"test_prefix must start with '{BASE_TEST_PREFIX}', got: {self.test_prefix}")

        return errors

    def terraform_dir(self, suite_name: str) -> Path:
        """Return the Terraform root module directory for a suite."""
        return self.smoke_tests_dir / suite_name

    def __repr__(self) -> str:
        """Return string representation with the API key hidden."""
        return (
            f"SmokeTestConfig("
            f"test_prefix={self.test_prefix}, "
            f"smoke_tests_dir={self.smoke_tests_dir}, "
            f"terraform_binary={self.terraform_binary}, "
            f"dd_site={self.dd_site}, "
            f"aws_region={self.aws_region})"
        )
