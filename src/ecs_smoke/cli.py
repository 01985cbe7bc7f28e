"""
ECS smoke test CLI.

Runs one half of a suite's lifecycle by hand, reads outputs of an applied
suite, and checks for task definitions left behind by a failed teardown.

Usage:
    ecs-smoke prefix
    ecs-smoke apply ecs_fargate
    ecs-smoke outputs ecs_fargate ust-docker-labels
    ecs-smoke destroy ecs_fargate
    ecs-smoke leaks
"""

import json
import logging
from pathlib import Path

import click

from ecs_smoke import __version__
from ecs_smoke.config import SmokeTestConfig
from ecs_smoke.ecs import EcsTaskDefinitionGateway
from ecs_smoke.exceptions import (
    ConfigurationError,
    EcsGatewayError,
    SmokeTestError,
    TerraformApplyError,
    TerraformError,
)
from ecs_smoke.logging_config import LoggerType, logger_factory
from ecs_smoke.suite import SUITES, SmokeSuite

suite_argument = click.argument("suite", type=click.Choice(sorted(SUITES)))


def _load_config() -> SmokeTestConfig:
    try:
        return SmokeTestConfig.from_env()
    except ConfigurationError as e:
        raise click.ClickException(f"Configuration error: {e}")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Set logging level",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write DEBUG logs to this file",
)
@click.option("--quiet", "-q", is_flag=True, help="Discard log output, print command results only")
def cli(log_level: str, log_file: Path | None, quiet: bool):
    """ECS smoke test CLI.

    Provisions and inspects the Terraform smoke test suites for the
    Datadog ECS modules.
    """
    if quiet and log_file is not None:
        raise click.UsageError("--quiet and --log-file cannot be used together")

    level = getattr(logging, log_level.upper())
    if quiet:
        logger_factory(LoggerType.QUIET)
    elif log_file is not None:
        logger_factory(LoggerType.DEFAULT, log_file=log_file, level=level)
    else:
        logger_factory(LoggerType.CONSOLE, level=level)


@cli.command()
def prefix():
    """Print the resource name prefix for this run."""
    click.echo(_load_config().test_prefix)


@cli.command()
@suite_argument
def apply(suite: str):
    """
    Run terraform init and apply for a suite.

    Examples:
        ecs-smoke apply ecs_ec2
    """
    config = _load_config()
    smoke_suite = SmokeSuite.from_config(suite, config)

    click.echo(f"Applying {suite} with prefix {config.test_prefix}")
    try:
        smoke_suite.setup()
    except TerraformApplyError as e:
        raise click.ClickException(f"Apply failed: {e}")

    click.echo(f"✓ {suite} applied")


@cli.command()
@suite_argument
def destroy(suite: str):
    """
    Run terraform destroy for a suite.

    Exits non-zero when destroy fails so leaked resources are not missed.
    """
    config = _load_config()
    smoke_suite = SmokeSuite.from_config(suite, config)

    click.echo(f"Destroying {suite} with prefix {config.test_prefix}")
    if not smoke_suite.teardown():
        raise click.ClickException(
            f"Destroy failed; resources prefixed '{config.test_prefix}' may still exist"
        )

    click.echo(f"✓ {suite} destroyed")


@cli.command()
@suite_argument
@click.argument("name", required=False)
def outputs(suite: str, name: str | None):
    """
    Print one output, or every output, of an applied suite as JSON.

    Examples:
        ecs-smoke outputs ecs_ec2
        ecs-smoke outputs ecs_fargate role-parsing-with-path
    """
    config = _load_config()
    terraform = SmokeSuite.from_config(suite, config).terraform

    try:
        value = terraform.output_json(name) if name else terraform.output_all()
    except TerraformError as e:
        raise click.ClickException(str(e))

    click.echo(json.dumps(value, indent=2, sort_keys=True))


@cli.command()
@click.argument("task_definition")
def containers(task_definition: str):
    """
    Show the containers ECS registered for a task definition.

    Examples:
        ecs-smoke containers terraform-test-ust-docker-labels:1
    """
    config = _load_config()
    gateway = EcsTaskDefinitionGateway(region=config.aws_region)

    try:
        container_definitions = gateway.describe_container_definitions(task_definition)
    except EcsGatewayError as e:
        raise click.ClickException(str(e))

    for container in container_definitions:
        click.echo(f"{container.name}: {container.image or '(no image)'}")
        for key, value in sorted(container.docker_labels.items()):
            click.echo(f"  {key}={value}")


@cli.command()
def leaks():
    """
    List ACTIVE task definitions still named with this run's prefix.

    Exits non-zero when any are found.
    """
    config = _load_config()
    gateway = EcsTaskDefinitionGateway(region=config.aws_region)

    try:
        arns = gateway.list_active_task_definitions(f"{config.test_prefix}-")
    except EcsGatewayError as e:
        raise click.ClickException(str(e))

    if not arns:
        click.echo(f"✓ No active task definitions with prefix {config.test_prefix}")
        return

    click.echo(f"Found {len(arns)} active task definition(s) with prefix {config.test_prefix}:")
    for arn in arns:
        click.echo(f"  - {arn}")
    raise click.ClickException("Leaked task definitions found")


@cli.command()
def version():
    """Show ECS smoke tests version."""
    click.echo(f"ECS Smoke Tests v{__version__}")


@cli.command()
def config():
    """Show current configuration from environment."""
    try:
        current = SmokeTestConfig.from_env()
    except SmokeTestError as e:
        raise click.ClickException(f"Configuration error: {e}")

    click.echo("Current Configuration:")
    click.echo("=" * 60)
    click.echo(f"TEST_PREFIX:        {current.test_prefix}")
    click.echo(f"SMOKE_TESTS_DIR:    {current.smoke_tests_dir}")
    click.echo(f"TERRAFORM_BINARY:   {current.terraform_binary}")
    click.echo(f"DD_SITE:            {current.dd_site}")
    click.echo(f"AWS_REGION:         {current.aws_region}")
    click.echo("=" * 60)

    errors = current.validate()
    if errors:
        click.echo()
        click.echo("Configuration Issues:")
        for error in errors:
            click.echo(f"  ⚠ {error}")
    else:
        click.echo()
        click.echo("✓ Configuration is valid")


if __name__ == "__main__":
    cli()  # pylint: disable=no-value-for-parameter
