"""Tests for replication policy resolution."""
import dataclasses

import pytest

from secret_provisioner.provisioning.domains.errors import ConfigError
from secret_provisioner.provisioning.domains.gcp_client import replication_to_proto
from secret_provisioner.provisioning.domains.models import Automatic, UserManaged
from secret_provisioner.provisioning.domains.replication import resolve_replication


class TestResolveReplication:

    def test_global_gives_automatic(self):
        assert resolve_replication(True, None) == Automatic()
        assert resolve_replication(True, "") == Automatic()

    def test_single_location(self):
        assert resolve_replication(False, "us-east1") == UserManaged(("us-east1",))

    def test_locations_split_in_order(self):
        policy = resolve_replication(False, "europe-west1,us-east1,europe-west1")
        assert policy.locations == ("europe-west1", "us-east1", "europe-west1")

    def test_tokens_not_validated(self):
        policy = resolve_replication(False, "us-east1,,not a region")
        assert policy.locations == ("us-east1", "", "not a region")

    def test_both_modes_rejected(self):
        with pytest.raises(ConfigError) as exc_info:
            resolve_replication(True, "us-east1")
        assert "not both" in str(exc_info.value)

    @pytest.mark.parametrize("locations", [None, ""])
    def test_neither_mode_rejected(self, locations):
        with pytest.raises(ConfigError):
            resolve_replication(False, locations)


class TestPolicyModel:

    def test_user_managed_requires_locations(self):
        with pytest.raises(ConfigError):
            UserManaged(())

    def test_user_managed_coerces_list_to_tuple(self):
        assert UserManaged(["us-east1"]).locations == ("us-east1",)

    def test_policy_is_immutable(self):
        policy = UserManaged(("us-east1",))
        with pytest.raises(dataclasses.FrozenInstanceError):
            policy.locations = ("europe-west1",)

    def test_automatic_proto(self):
        assert replication_to_proto(Automatic()) == {"automatic": {}}

    def test_user_managed_proto(self):
        assert replication_to_proto(UserManaged(("us-east1", "europe-west1"))) == {
            "user_managed": {
                "replicas": [{"location": "us-east1"}, {"location": "europe-west1"}]
            }
        }

    def test_unknown_policy_proto(self):
        with pytest.raises(TypeError):
            replication_to_proto("automatic")
