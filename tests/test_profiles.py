"""Tests for connection profiles and their config file."""

import pytest

from redshift_dataset_annotator.errors import ConfigFileError, ProfileNotConfiguredError, SourceUnavailableError
from redshift_dataset_annotator.profiles import (
    DEFAULT_PROFILE_NAME,
    ProfileConfig,
    Profiles,
    RedshiftConnection,
    cluster_identifier_from_host,
    load_profiles,
    new_profiles,
    reconfigure,
    reconfigure_profile,
    resolve_connection,
    save_profiles,
    workgroup_name_from_host,
)
from tests.fakes import FakePrompter

PROVISIONED = "examplecluster.abc123xyz789.us-west-1.redshift.amazonaws.com"
SERVERLESS = "analytics.123456789012.us-east-1.redshift-serverless.amazonaws.com"
PRIVATE = "redshift.internal.example.com"


class TestHostHelpers:
    def test_cluster_identifier(self):
        assert cluster_identifier_from_host(PROVISIONED) == "examplecluster"
        assert cluster_identifier_from_host(SERVERLESS) == ""
        assert cluster_identifier_from_host(PRIVATE) == ""

    def test_workgroup_name(self):
        assert workgroup_name_from_host(SERVERLESS) == "analytics"
        assert workgroup_name_from_host(PROVISIONED) == ""


class TestConfigFile:
    def test_missing_file_yields_default_profile(self, tmp_path):
        profiles = load_profiles(tmp_path / "config.yaml")
        assert profiles.get_default() == ProfileConfig(workgroup_name="default")

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        profiles = new_profiles()
        profiles.set(PROVISIONED, ProfileConfig(cluster_identifier="examplecluster", db_user="admin"))

        save_profiles(profiles, path)

        assert load_profiles(path) == profiles
        assert "workgroup_name: default" in path.read_text()

    def test_save_keeps_backup(self, tmp_path):
        path = tmp_path / "config.yaml"
        save_profiles(new_profiles(), path)
        first = path.read_text()

        updated = new_profiles()
        updated.set(PRIVATE, ProfileConfig(db_user="etl"))
        save_profiles(updated, path)

        assert (tmp_path / "config.yaml.bak").read_text() == first
        assert load_profiles(path).get(PRIVATE).db_user == "etl"

    def test_empty_file_has_no_profiles(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_profiles(path) == Profiles({})

    def test_invalid_yaml_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("[default]: {workgroup_name: [unclosed\n")
        with pytest.raises(ConfigFileError):
            load_profiles(path)

    def test_invalid_shape_raises(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigFileError, match="failed to parse"):
            load_profiles(path)


class TestReconfigure:
    def test_serverless_host_needs_no_prompt(self):
        prompter = FakePrompter()
        profile = reconfigure_profile(ProfileConfig(db_user="admin"), SERVERLESS, prompter)

        assert profile == ProfileConfig(workgroup_name="analytics")
        assert prompter.asked == []

    def test_provisioned_host_prompts_for_cluster_and_user(self):
        prompter = FakePrompter(answers={"Enter db user": "etl"})
        profile = reconfigure_profile(ProfileConfig(), PROVISIONED, prompter)

        assert profile == ProfileConfig(cluster_identifier="examplecluster", db_user="etl")
        assert prompter.asked == ["Enter cluster identifier", "Enter db user"]

    def test_unknown_host_confirmed_serverless(self):
        prompter = FakePrompter(
            answers={"Enter workgroup name": "analytics"},
            confirms={f"{PRIVATE} is serverless?": True},
        )
        profile = reconfigure_profile(ProfileConfig(db_user="admin"), PRIVATE, prompter)
        assert profile == ProfileConfig(workgroup_name="analytics")

    def test_unknown_host_provisioned(self):
        prompter = FakePrompter(answers={"Enter cluster identifier": "private-cluster"})
        profile = reconfigure_profile(ProfileConfig(workgroup_name="default"), PRIVATE, prompter)
        assert profile == ProfileConfig(cluster_identifier="private-cluster", db_user="admin")

    def test_reconfigure_default_profile_saves(self, tmp_path):
        path = tmp_path / "config.yaml"
        prompter = FakePrompter(confirms={"default profile is serverless?": True})

        reconfigure(new_profiles(), "", prompter, path)

        assert load_profiles(path).get(DEFAULT_PROFILE_NAME) == ProfileConfig(workgroup_name="default")


class TestResolveConnection:
    def test_serverless_host(self):
        connection = resolve_connection({"Host": SERVERLESS, "Database": "dev"}, Profiles({}))
        assert connection == RedshiftConnection(database="dev", workgroup_name="analytics")
        assert connection.execute_statement_args() == {"Database": "dev", "WorkgroupName": "analytics"}

    def test_provisioned_host_with_profile(self):
        profiles = Profiles({PROVISIONED: ProfileConfig(db_user="admin")})
        connection = resolve_connection({"Host": PROVISIONED, "Database": "dev"}, profiles)

        assert connection.execute_statement_args() == {
            "Database": "dev",
            "ClusterIdentifier": "examplecluster",
            "DbUser": "admin",
        }

    def test_falls_back_to_default_profile(self):
        profiles = Profiles({DEFAULT_PROFILE_NAME: ProfileConfig(db_user="admin")})
        connection = resolve_connection({"Host": PROVISIONED, "Database": "dev"}, profiles)
        assert connection.db_user == "admin"

    def test_private_host_uses_profile_workgroup(self):
        connection = resolve_connection({"Host": PRIVATE, "Database": "dev"}, new_profiles())
        assert connection == RedshiftConnection(database="dev", workgroup_name="default")

    def test_private_host_uses_cluster_id_parameter(self):
        profiles = Profiles({PRIVATE: ProfileConfig(db_user="admin")})
        connection = resolve_connection(
            {"Host": PRIVATE, "Database": "dev", "ClusterId": "private-cluster"}, profiles
        )
        assert connection.cluster_identifier == "private-cluster"

    def test_missing_db_user_raises(self):
        with pytest.raises(ProfileNotConfiguredError, match="db user not configured") as exc_info:
            resolve_connection({"Host": PROVISIONED, "Database": "dev"}, new_profiles())
        assert isinstance(exc_info.value, SourceUnavailableError)
        assert "redshift-dataset-annotator configure" in str(exc_info.value)

    def test_missing_cluster_identifier_raises(self):
        profiles = Profiles({PRIVATE: ProfileConfig(db_user="admin")})
        with pytest.raises(ProfileNotConfiguredError, match="cluster identifier"):
            resolve_connection({"Host": PRIVATE, "Database": "dev"}, profiles)
