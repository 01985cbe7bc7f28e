"""
Custom exceptions for the ECS smoke tests.

These exceptions separate failures of the external tooling (Terraform,
the ECS API) from assertion failures raised by the test cases themselves.
"""


class SmokeTestError(Exception):
    """Base class for all smoke test errors."""

    pass


class ConfigurationError(SmokeTestError):
    """Error in smoke test configuration."""

    pass


class TerraformError(SmokeTestError):
    """A Terraform command failed."""

    pass


class TerraformApplyError(TerraformError):
    """terraform init/apply did not succeed within the retry budget."""

    pass


class TerraformDestroyError(TerraformError):
    """terraform destroy failed; provisioned resources may have leaked."""

    pass


class TerraformOutputError(TerraformError):
    """A Terraform output is missing, empty or unreadable."""

    def __init__(self, output_name: str, message: str):
        self.output_name = output_name
        super().__init__(f"Output '{output_name}': {message}")


class ContainerDefinitionDecodeError(SmokeTestError):
    """Container definitions JSON could not be decoded into the expected schema."""

    pass


class EcsGatewayError(SmokeTestError):
    """A call to the ECS API failed."""

    pass


class LeakedInfrastructureWarning(UserWarning):
    """Teardown failed and billable resources are probably still running."""

    pass
