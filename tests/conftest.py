"""Shared fixtures: an in-memory SecretStore that records every call."""
import pytest

from secret_provisioner.provisioning.domains.errors import AlreadyExistsError, NotFoundError, TransientError
from secret_provisioner.provisioning.domains.gcp_client import SecretStore
from secret_provisioner.provisioning.domains.models import SecretContainer, SecretVersion


class InMemorySecretStore(SecretStore):
    """Fake Secret Manager keeping containers, their replication and versions."""

    def __init__(self):
        self.replication = {}  # container name -> policy
        self.versions = {}  # container name -> [payload, ...]
        self.calls = []  # (operation, secret name)
        self.failures = {}  # (operation, secret name) -> exception to raise
        self.opened = False
        self.closed = False

    def fail(self, operation, name, error=None):
        self.failures[(operation, name)] = error or TransientError(f"{operation} rejected")

    def _record(self, operation, name):
        self.calls.append((operation, name))
        error = self.failures.get((operation, name))
        if error is not None:
            raise error

    def get_container(self, project_id, name):
        self._record("get", name)
        ref = self.container_ref(project_id, name)
        if ref.name not in self.replication:
            raise NotFoundError(f"Secret [{ref.name}] not found")
        return ref

    def create_container(self, project_id, name, policy):
        self._record("create", name)
        ref = self.container_ref(project_id, name)
        if ref.name in self.replication:
            raise AlreadyExistsError(f"Secret [{ref.name}] already exists")
        self.replication[ref.name] = policy
        self.versions[ref.name] = []
        return ref

    def append_version(self, container, payload):
        self._record("append", container.name.rsplit("/", 1)[-1])
        self.versions[container.name].append(payload)
        return SecretVersion(name=f"{container.name}/versions/{len(self.versions[container.name])}")

    def open(self):
        self.opened = True

    def close(self):
        self.closed = True

    def seed(self, project_id, name, policy):
        """Create a container behind the workflow's back."""
        ref = self.container_ref(project_id, name)
        self.replication[ref.name] = policy
        self.versions[ref.name] = []
        return ref


@pytest.fixture
def store():
    return InMemorySecretStore()


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a file and return its path."""
    def _write(content, name="secrets.csv"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8", newline="")
        return path
    return _write
