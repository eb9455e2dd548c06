"""Workflow for provisioning secrets: check, create if absent, append version."""
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from ..domains.errors import AlreadyExistsError, NotFoundError, ProvisioningError, SecretStoreError, Step
from ..domains.gcp_client import GCPSecretStore, SecretStore
from ..domains.models import ReplicationPolicy, SecretContainer, SecretRecord
from ..domains.record_parser import read_secrets_file

logger = logging.getLogger(__name__)


class UpsertOrchestrator:
    """
    Drives a SecretStore through the upsert protocol for each record.

    Records are processed one at a time, in input order. The run stops at the
    first failing record; records already processed are not rolled back, and
    re-running the same input is safe because every step tolerates replays.
    """

    def __init__(self, store: SecretStore):
        self.store = store

    def run(self, project_id: str, policy: ReplicationPolicy, records: Sequence[SecretRecord]) -> int:
        """
        Upsert every record.

        Returns:
            Number of records processed

        Raises:
            ProvisioningError: For the first record that fails, naming its step
        """
        for record in records:
            container = self._ensure_container(project_id, policy, record)

            logger.info(f"Adding version to secret: {record.name}")
            try:
                version = self.store.append_version(container, record.value)
            except SecretStoreError as e:
                raise ProvisioningError(record.name, Step.APPEND_VERSION, e) from e
            logger.debug(f"Wrote {version.name}")

        return len(records)

    def _ensure_container(self, project_id: str, policy: ReplicationPolicy, record: SecretRecord) -> SecretContainer:
        try:
            return self.store.get_container(project_id, record.name)
        except NotFoundError:
            pass
        except SecretStoreError as e:
            raise ProvisioningError(record.name, Step.EXISTENCE_CHECK, e) from e

        # Replication is only applied here; existing secrets keep theirs.
        logger.info(f"Creating secret: {record.name} ({policy.describe()} replication)")
        try:
            return self.store.create_container(project_id, record.name, policy)
        except AlreadyExistsError:
            logger.debug(f"Secret {record.name} was created concurrently, reusing it")
            return self.store.container_ref(project_id, record.name)
        except SecretStoreError as e:
            raise ProvisioningError(record.name, Step.CREATE, e) from e


def upload_secrets(
    project_id: str,
    secrets_file: Union[str, Path],
    policy: ReplicationPolicy,
    store: Optional[SecretStore] = None,
    credentials_path: Optional[str] = None,
) -> int:
    """
    Parse a secrets file and provision every secret into project_id.

    The file is fully parsed before any backend call. The store is opened for
    the duration of the run and closed on every exit path.

    Args:
        project_id: Target GCP project
        secrets_file: Path to the name,value CSV file
        policy: Replication applied to secrets that must be created
        store: Secret store to use (defaults to GCP Secret Manager)
        credentials_path: Service account JSON for the default store

    Returns:
        Number of secrets provisioned

    Raises:
        FormatError: If the secrets file is malformed
        SecretStoreError: If the store connection can't be established
        ProvisioningError: For the first secret that fails
    """
    records = read_secrets_file(secrets_file)
    logger.info(f"Found {len(records)} secret(s) to upload to project {project_id}")

    if store is None:
        store = GCPSecretStore(credentials_path=credentials_path)

    with store:
        count = UpsertOrchestrator(store).run(project_id, policy, records)

    logger.info(f"Successfully uploaded {count} secret(s)")
    return count
