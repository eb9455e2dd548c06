"""Secret store interface and GCP Secret Manager adapter."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import secretmanager
from google.oauth2 import service_account

from .errors import AlreadyExistsError, NotFoundError, SecretStoreError, TransientError
from .models import Automatic, ReplicationPolicy, SecretContainer, SecretVersion, UserManaged

logger = logging.getLogger(__name__)


class SecretStore(ABC):
    """
    Capabilities the upsert workflow needs from a secret backend.

    Implementations report expected outcomes through NotFoundError and
    AlreadyExistsError and every other failure through TransientError.
    Stores are context managers: the connection is released on exit.
    """

    @abstractmethod
    def get_container(self, project_id: str, name: str) -> SecretContainer:
        """Look up an existing secret. Raises NotFoundError if absent."""

    @abstractmethod
    def create_container(self, project_id: str, name: str, policy: ReplicationPolicy) -> SecretContainer:
        """Create a secret with the given replication. Raises AlreadyExistsError if taken."""

    @abstractmethod
    def append_version(self, container: SecretContainer, payload: bytes) -> SecretVersion:
        """Add a new version holding payload to an existing secret."""

    def container_ref(self, project_id: str, name: str) -> SecretContainer:
        """Handle for a secret known to exist, without a round trip."""
        return SecretContainer(name=f"projects/{project_id}/secrets/{name}")

    def open(self) -> None:
        """Acquire the backend connection. Default is a no-op."""

    def close(self) -> None:
        """Release the backend connection. Default is a no-op."""

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def replication_to_proto(policy: ReplicationPolicy) -> Dict[str, Any]:
    """Convert a ReplicationPolicy into a Secret Manager Replication message dict."""
    if isinstance(policy, Automatic):
        return {"automatic": {}}
    if isinstance(policy, UserManaged):
        return {
            "user_managed": {
                "replicas": [{"location": location} for location in policy.locations]
            }
        }
    raise TypeError(f"Unknown replication policy: {policy!r}")


def _classify(error: gcp_exceptions.GoogleAPIError) -> SecretStoreError:
    if isinstance(error, gcp_exceptions.NotFound):
        return NotFoundError(str(error))
    if isinstance(error, gcp_exceptions.AlreadyExists):
        return AlreadyExistsError(str(error))
    return TransientError(str(error))


class GCPSecretStore(SecretStore):
    """SecretStore backed by google-cloud-secret-manager."""

    def __init__(self, credentials_path: Optional[str] = None, client: Optional[secretmanager.SecretManagerServiceClient] = None):
        self._credentials_path = credentials_path
        self._client = client
        # A client passed in is owned by the caller and is never closed here
        self._owns_client = client is None

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialize client."""
        if self._client is None:
            try:
                if self._credentials_path:
                    credentials = service_account.Credentials.from_service_account_file(self._credentials_path)
                    logger.debug(f"Using service account credentials from {self._credentials_path}")
                    self._client = secretmanager.SecretManagerServiceClient(credentials=credentials)
                else:
                    self._client = secretmanager.SecretManagerServiceClient()
            except (auth_exceptions.GoogleAuthError, ValueError, OSError) as e:
                raise SecretStoreError(f"Failed to create Secret Manager client: {e}") from e
        return self._client

    def open(self) -> None:
        self.client

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.transport.close()
            self._client = None

    def get_container(self, project_id: str, name: str) -> SecretContainer:
        try:
            response = self.client.get_secret(request={"name": self.container_ref(project_id, name).name})
        except gcp_exceptions.GoogleAPIError as e:
            raise _classify(e) from e
        return SecretContainer(name=response.name)

    def create_container(self, project_id: str, name: str, policy: ReplicationPolicy) -> SecretContainer:
        try:
            response = self.client.create_secret(
                request={
                    "parent": f"projects/{project_id}",
                    "secret_id": name,
                    "secret": {"replication": replication_to_proto(policy)},
                }
            )
        except gcp_exceptions.GoogleAPIError as e:
            raise _classify(e) from e
        return SecretContainer(name=response.name)

    def append_version(self, container: SecretContainer, payload: bytes) -> SecretVersion:
        try:
            response = self.client.add_secret_version(
                request={"parent": container.name, "payload": {"data": payload}}
            )
        except gcp_exceptions.GoogleAPIError as e:
            raise _classify(e) from e
        return SecretVersion(name=response.name)
