"""Replication policy resolution."""
from typing import Optional

from .errors import ConfigError
from .models import Automatic, ReplicationPolicy, UserManaged


def resolve_replication(global_replication: bool, locations: Optional[str]) -> ReplicationPolicy:
    """
    Resolve the replication policy applied to every secret created in a run.

    Exactly one mode must be selected: automatic (global) replication, or a
    comma-separated list of locations for user-managed replication. Location
    tokens are kept in order and are not validated here; the backend rejects
    unknown locations at create time.

    Args:
        global_replication: Use automatic replication
        locations: Comma-separated location list, e.g. "us-east1,europe-west1"

    Returns:
        Automatic() or UserManaged(locations)

    Raises:
        ConfigError: If both modes or neither mode is selected
    """
    if global_replication and locations:
        raise ConfigError("Either --global or --secrets-location must be provided, but not both")
    if not global_replication and not locations:
        raise ConfigError("Either --global or --secrets-location must be provided")

    if global_replication:
        return Automatic()
    return UserManaged(tuple(locations.split(",")))
