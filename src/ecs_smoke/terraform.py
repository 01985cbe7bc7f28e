"""
Terraform CLI invocation.

This module wraps the handful of Terraform commands the smoke suites need
(init, apply, destroy, output) behind a small runner that knows about
retryable errors and converts CLI failures into package exceptions.
"""

import json
import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

from ecs_smoke.exceptions import (
    TerraformApplyError,
    TerraformDestroyError,
    TerraformError,
    TerraformOutputError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TerraformOptions:
    """
    Options for running Terraform against one root module.

    Instances are immutable: ``vars``, ``retryable_errors`` and ``env_vars``
    are exposed as read-only mappings so a suite's configuration bundle
    cannot be altered by the test cases sharing it.

    Attributes
    ----------
    terraform_dir : Path
        Root module directory, used as the working directory
    terraform_binary : str
        Name or path of the Terraform executable
    vars : Mapping[str, Any]
        Input variables passed with ``-var``
    retryable_errors : Mapping[str, str]
        Substring of a known transient error -> explanation logged on retry
    max_retries : int
        Retries after the first attempt; only retryable errors are retried
    time_between_retries : float
        Seconds to sleep between attempts
    no_color : bool
        Pass ``-no-color`` to init, apply and destroy
    lock : bool
        Hold the state lock during apply and destroy
    env_vars : Mapping[str, str]
        Extra environment variables for the Terraform process
    command_timeout : int
        Timeout in seconds for init, apply and destroy
    """

    terraform_dir: Path
    terraform_binary: str = "terraform"
    vars: Mapping[str, Any] = field(default_factory=dict)
    retryable_errors: Mapping[str, str] = field(default_factory=dict)
    max_retries: int = 0
    time_between_retries: float = 0.0
    no_color: bool = False
    lock: bool = False
    env_vars: Mapping[str, str] = field(default_factory=dict)
    command_timeout: int = 3600

    def __post_init__(self):
        object.__setattr__(self, "terraform_dir", Path(self.terraform_dir))
        object.__setattr__(self, "vars", MappingProxyType(dict(self.vars)))
        object.__setattr__(self, "retryable_errors", MappingProxyType(dict(self.retryable_errors)))
        object.__setattr__(self, "env_vars", MappingProxyType(dict(self.env_vars)))
        if self.max_retries < 0:
            raise ValueError(f"max_retries must not be negative, got: {self.max_retries}")


def format_var(value: Any) -> str:
    """
    Render a variable value the way Terraform parses ``-var`` arguments.

    Strings pass through untouched, booleans become ``true``/``false`` and
    lists or maps are written as JSON, which Terraform accepts as HCL.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, separators=(",", ":"))


def _stringify_output_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (str, bool, int, float)):
        return format_var(value)
    return json.dumps(value, separators=(",", ":"))


class Terraform:
    """
    Runs Terraform commands for a single root module.

    Examples
    --------
    >>> options = TerraformOptions(terraform_dir=Path("smoke_tests/ecs_ec2"))
    >>> terraform = Terraform(options)
    >>> terraform.init_and_apply()
    >>> terraform.output("agent_only_task_arn")
    'arn:aws:ecs:us-east-1:123456789012:task-definition/terraform-test-agent-only:1'
    """

    def __init__(self, options: TerraformOptions, sleep: Callable[[float], None] = time.sleep):
        self.options = options
        self._sleep = sleep

    # --- Command construction ---

    def _var_args(self) -> list[str]:
        args = []
        for name, value in self.options.vars.items():
            args.extend(["-var", f"{name}={format_var(value)}"])
        return args

    def _color_args(self) -> list[str]:
        return ["-no-color"] if self.options.no_color else []

    def _lock_args(self) -> list[str]:
        return [f"-lock={'true' if self.options.lock else 'false'}"]

    def init_args(self) -> list[str]:
        return ["init", "-input=false", *self._lock_args(), *self._color_args()]

    def apply_args(self) -> list[str]:
        return [
            "apply",
            "-input=false",
            "-auto-approve",
            *self._lock_args(),
            *self._color_args(),
            *self._var_args(),
        ]

    def destroy_args(self) -> list[str]:
        return [
            "destroy",
            "-input=false",
            "-auto-approve",
            *self._lock_args(),
            *self._color_args(),
            *self._var_args(),
        ]

    # --- Execution ---

    def _run(self, args: list[str], timeout: int) -> subprocess.CompletedProcess:
        cmd = [self.options.terraform_binary, *args]
        env = {**os.environ, "TF_IN_AUTOMATION": "1", **self.options.env_vars}

        logger.debug(
            "Running terraform",
            extra={"command": args[0], "terraform_dir": str(self.options.terraform_dir)},
        )

        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            cwd=self.options.terraform_dir,
            env=env,
        )

    def _retryable_explanation(self, output: str) -> str | None:
        for error_substring, explanation in self.options.retryable_errors.items():
            if error_substring in output:
                return explanation
        return None

    def _run_with_retries(
        self,
        description: str,
        args: list[str],
        error_class: type[TerraformError],
    ) -> str:
        attempts = self.options.max_retries + 1
        attempt = 1

        while True:
            try:
                result = self._run(args, timeout=self.options.command_timeout)
            except subprocess.CalledProcessError as e:
                output = f"{e.stdout or ''}\n{e.stderr or ''}"
                explanation = self._retryable_explanation(output)

                if explanation is None:
                    raise error_class(
                        f"{description} failed with return code {e.returncode}: {e.stderr}"
                    ) from e

                if attempt == attempts:
                    raise error_class(
                        f"{description} failed after {attempts} attempt(s) "
                        f"with a retryable error ({explanation}): {e.stderr}"
                    ) from e

                logger.warning(
                    f"{description} hit a retryable error, retrying",
                    extra={
                        "attempt": attempt,
                        "max_attempts": attempts,
                        "explanation": explanation,
                        "sleep_seconds": self.options.time_between_retries,
                    },
                )
                self._sleep(self.options.time_between_retries)
                attempt += 1
                continue
            except subprocess.TimeoutExpired as e:
                raise error_class(f"{description} timed out after {e.timeout} seconds") from e
            except FileNotFoundError as e:
                raise error_class(
                    f"Terraform binary not found: {self.options.terraform_binary}"
                ) from e

            logger.info(
                f"{description} completed",
                extra={"attempt": attempt, "terraform_dir": str(self.options.terraform_dir)},
            )
            return result.stdout

    def init(self) -> str:
        """Run ``terraform init``, retrying known transient errors."""
        return self._run_with_retries("terraform init", self.init_args(), TerraformApplyError)

    def apply(self) -> str:
        """Run ``terraform apply``, retrying known transient errors."""
        return self._run_with_retries("terraform apply", self.apply_args(), TerraformApplyError)

    def init_and_apply(self) -> str:
        """
        Run ``terraform init`` followed by ``terraform apply``.

        Returns
        -------
        str
            stdout of the apply command

        Raises
        ------
        TerraformApplyError
            If either command fails with a non-retryable error, or keeps
            failing once the retry budget is spent
        """
        self.init()
        return self.apply()

    def destroy(self) -> str:
        """
        Run ``terraform destroy``.

        Raises
        ------
        TerraformDestroyError
            If destroy fails; the caller should treat resources as leaked
        """
        return self._run_with_retries("terraform destroy", self.destroy_args(), TerraformDestroyError)

    # --- Outputs ---

    def output_json(self, name: str) -> Any:
        """
        Read one output as decoded JSON.

        Raises
        ------
        TerraformOutputError
            If the output is not defined, is null, or cannot be read
        """
        try:
            result = self._run(["output", "-no-color", "-json", name], timeout=120)
        except subprocess.CalledProcessError as e:
            raise TerraformOutputError(name, f"terraform output failed: {(e.stderr or '').strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise TerraformOutputError(name, f"terraform output timed out after {e.timeout} seconds") from e
        except FileNotFoundError as e:
            raise TerraformOutputError(name, f"Terraform binary not found: {self.options.terraform_binary}") from e

        try:
            value = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise TerraformOutputError(name, f"output is not valid JSON: {e}") from e

        if value is None:
            raise TerraformOutputError(name, "output is null")
        return value

    def output(self, name: str) -> str:
        """
        Read a scalar output as a string.

        Raises
        ------
        TerraformOutputError
            If the output is missing, empty, or a map/list
        """
        value = self.output_json(name)
        if isinstance(value, (dict, list)):
            raise TerraformOutputError(name, f"expected a scalar output, got {type(value).__name__}")

        text = _stringify_output_value(value)
        if not text:
            raise TerraformOutputError(name, "output is empty")
        return text

    def output_map(self, name: str) -> dict[str, str]:
        """
        Read a map or object output with every value rendered as a string.

        Nested structures are rendered as compact JSON, so a
        ``container_definitions`` attribute is returned as the JSON text
        ECS emitted.

        Raises
        ------
        TerraformOutputError
            If the output is missing or is not a map
        """
        value = self.output_json(name)
        if not isinstance(value, dict):
            raise TerraformOutputError(name, f"expected a map output, got {type(value).__name__}")
        return {key: _stringify_output_value(item) for key, item in value.items()}

    def output_all(self) -> dict[str, Any]:
        """Read every output of the root module as ``{name: value}``."""
        try:
            result = self._run(["output", "-no-color", "-json"], timeout=120)
        except subprocess.CalledProcessError as e:
            raise TerraformError(f"terraform output failed: {(e.stderr or '').strip()}") from e
        except subprocess.TimeoutExpired as e:
            raise TerraformError(f"terraform output timed out after {e.timeout} seconds") from e
        except FileNotFoundError as e:
            raise TerraformError(f"Terraform binary not found: {self.options.terraform_binary}") from e

        try:
            outputs = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as e:
            raise TerraformError(f"terraform output is not valid JSON: {e}") from e

        return {name: meta.get("value") for name, meta in outputs.items()}
