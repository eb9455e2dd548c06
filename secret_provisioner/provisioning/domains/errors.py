"""Error taxonomy for secret provisioning."""
from enum import Enum


class ProvisionerError(Exception):
    """Base class for all provisioning errors."""
    pass


class FormatError(ProvisionerError):
    """Malformed or unreadable secrets file."""
    pass


class ConfigError(ProvisionerError):
    """Invalid or contradictory configuration or invocation parameters."""
    pass


class SecretStoreError(ProvisionerError):
    """Generic failure reported by the secret store backend."""
    pass


class TransientError(SecretStoreError):
    """Backend call failed (network, permission, quota, invalid argument, ...)."""
    pass


class NotFoundError(SecretStoreError):
    """The requested secret container does not exist."""
    pass


class AlreadyExistsError(SecretStoreError):
    """The secret container was created by someone else first."""
    pass


class Step(str, Enum):
    """Upsert step a record was in when it failed."""
    EXISTENCE_CHECK = "existence check"
    CREATE = "create"
    APPEND_VERSION = "append version"


_FAILURE_MESSAGES = {
    Step.EXISTENCE_CHECK: "failed to check existence of secret '{name}'",
    Step.CREATE: "failed to create secret '{name}'",
    Step.APPEND_VERSION: "failed to add secret version to '{name}'",
}


class ProvisioningError(ProvisionerError):
    """A single record failed; the run was aborted at this record."""

    def __init__(self, secret_name: str, step: Step, cause: Exception):
        self.secret_name = secret_name
        self.step = step
        self.cause = cause
        message = _FAILURE_MESSAGES[step].format(name=secret_name)
        super().__init__(f"{message} (step: {step.value}): {cause}")
