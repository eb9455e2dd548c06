"""Domain models for secret provisioning."""
from dataclasses import dataclass, field
from typing import Tuple, Union

from .errors import ConfigError


@dataclass(frozen=True)
class SecretRecord:
    """One row of the secrets file. The value is never included in repr()."""
    name: str
    value: bytes = field(repr=False)


@dataclass(frozen=True)
class Automatic:
    """Replication managed by Secret Manager."""

    def describe(self) -> str:
        return "automatic"


@dataclass(frozen=True)
class UserManaged:
    """Replication to an explicit, ordered set of locations."""
    locations: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "locations", tuple(self.locations))
        if not self.locations:
            raise ConfigError("User-managed replication requires at least one location")

    def describe(self) -> str:
        return f"user-managed ({','.join(self.locations)})"


ReplicationPolicy = Union[Automatic, UserManaged]


@dataclass(frozen=True)
class SecretContainer:
    """Handle to an existing secret, e.g. projects/p/secrets/db-password."""
    name: str


@dataclass(frozen=True)
class SecretVersion:
    """Handle to a written version, e.g. projects/p/secrets/db-password/versions/3."""
    name: str
