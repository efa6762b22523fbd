"""Redshift connection profiles stored in the local config file.

QuickSight only tells us a Redshift data source's host and database. How
to reach it through the Redshift Data API (serverless workgroup, or
provisioned cluster + db user) is kept per host in
``<config_dir>/config.yaml``, with a ``[default]`` profile as fallback:

    "[default]":
      workgroup_name: default
    examplecluster.abc123xyz789.us-west-1.redshift.amazonaws.com:
      cluster_identifier: examplecluster
      db_user: admin

Usage:
    from redshift_dataset_annotator.profiles import load_profiles, resolve_connection
    profiles = load_profiles(settings.config_file)
    connection = resolve_connection(redshift_parameters, profiles)
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel, RootModel, ValidationError

from redshift_dataset_annotator.errors import ConfigFileError, ProfileNotConfiguredError
from redshift_dataset_annotator.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROFILE_NAME = "[default]"

PROVISIONED_SUFFIX = "redshift.amazonaws.com"
SERVERLESS_SUFFIX = "redshift-serverless.amazonaws.com"


# -- Host name helpers ---------------------------------------------------------


def is_provisioned(host: str) -> bool:
    return host.endswith(PROVISIONED_SUFFIX)


def is_serverless(host: str) -> bool:
    return host.endswith(SERVERLESS_SUFFIX)


def cluster_identifier_from_host(host: str) -> str:
    """examplecluster.abc.us-west-1.redshift.amazonaws.com -> examplecluster."""
    return host.split(".")[0] if is_provisioned(host) else ""


def workgroup_name_from_host(host: str) -> str:
    """default.123456789012.us-east-1.redshift-serverless.amazonaws.com -> default."""
    return host.split(".")[0] if is_serverless(host) else ""


# -- Config file ---------------------------------------------------------------


class ProfileConfig(BaseModel):
    cluster_identifier: str | None = None
    workgroup_name: str | None = None
    db_user: str | None = None


class Profiles(RootModel[dict[str, ProfileConfig]]):
    """All profiles, keyed by Redshift host name or DEFAULT_PROFILE_NAME."""

    def get(self, host: str) -> ProfileConfig | None:
        return self.root.get(host)

    def get_default(self) -> ProfileConfig | None:
        return self.root.get(DEFAULT_PROFILE_NAME)

    def set(self, name: str, profile: ProfileConfig) -> None:
        self.root[name] = profile

    def to_yaml(self) -> str:
        return yaml.safe_dump(
            self.model_dump(exclude_none=True), default_flow_style=False, sort_keys=True
        )


def new_profiles() -> Profiles:
    return Profiles({DEFAULT_PROFILE_NAME: ProfileConfig(workgroup_name="default")})


def load_profiles(path: Path) -> Profiles:
    """Load profiles from `path`. A missing file yields the default profiles.

    Raises:
        ConfigFileError: If the file cannot be read or is not a valid profile mapping.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return new_profiles()
    except (OSError, yaml.YAMLError) as e:
        raise ConfigFileError(f"failed to read config file {path}: {e}") from e

    try:
        return Profiles.model_validate(data or {})
    except ValidationError as e:
        raise ConfigFileError(f"failed to parse {path}: {e}") from e


def save_profiles(profiles: Profiles, path: Path) -> None:
    """Write profiles to `path`, keeping the previous file as `<path>.bak`.

    Raises:
        ConfigFileError: If the directory or file cannot be written.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            shutil.move(str(path), str(path) + ".bak")
        path.write_text(profiles.to_yaml())
    except OSError as e:
        raise ConfigFileError(f"failed to write config file {path}: {e}") from e
    logger.info("config_file_saved", path=str(path))


# -- Interactive configuration -------------------------------------------------


class Prompter(Protocol):
    def ask(self, text: str, default: str) -> str: ...

    def confirm(self, text: str, default: bool) -> bool: ...


def reconfigure_profile(profile: ProfileConfig, host: str, prompter: Prompter) -> ProfileConfig:
    """Return an updated copy of `profile` for `host`, prompting where needed."""
    updated = profile.model_copy()

    if is_serverless(host):
        updated.workgroup_name = (
            profile.workgroup_name or workgroup_name_from_host(host) or "default"
        )
        updated.cluster_identifier = None
        updated.db_user = None
        return updated

    if not is_provisioned(host):
        label = host or "default profile"
        if prompter.confirm(f"{label} is serverless?", False):
            updated.workgroup_name = prompter.ask(
                "Enter workgroup name", profile.workgroup_name or "default"
            )
            updated.cluster_identifier = None
            updated.db_user = None
            return updated

    updated.workgroup_name = None
    updated.cluster_identifier = (
        prompter.ask(
            "Enter cluster identifier",
            profile.cluster_identifier or cluster_identifier_from_host(host),
        )
        or None
    )
    updated.db_user = prompter.ask("Enter db user", profile.db_user or "admin") or None
    return updated


def reconfigure(profiles: Profiles, host: str, prompter: Prompter, path: Path) -> Profiles:
    """Prompt for the profile of `host` (or the default profile) and save."""
    name = host or DEFAULT_PROFILE_NAME
    current = profiles.get(name) or ProfileConfig()
    profiles.set(name, reconfigure_profile(current, host, prompter))
    save_profiles(profiles, path)
    return profiles


# -- Connection resolution -----------------------------------------------------


@dataclass(frozen=True)
class RedshiftConnection:
    """Target of a Redshift Data API ExecuteStatement call."""

    database: str
    workgroup_name: str | None = None
    cluster_identifier: str | None = None
    db_user: str | None = None

    def execute_statement_args(self) -> dict[str, Any]:
        args: dict[str, Any] = {"Database": self.database}
        if self.workgroup_name:
            args["WorkgroupName"] = self.workgroup_name
        else:
            args["ClusterIdentifier"] = self.cluster_identifier
            args["DbUser"] = self.db_user
        return args


def resolve_connection(redshift_parameters: dict[str, Any], profiles: Profiles) -> RedshiftConnection:
    """Work out how to reach a QuickSight Redshift data source.

    Args:
        redshift_parameters: DataSourceParameters.RedshiftParameters of the data source.
        profiles: Local connection profiles.

    Raises:
        ProfileNotConfiguredError: If no profile supplies a db user or cluster id.
    """
    host = redshift_parameters.get("Host") or ""
    database = redshift_parameters.get("Database") or ""
    logger.debug("redshift_connection_resolve", host=host, database=database)

    if is_serverless(host):
        return RedshiftConnection(database=database, workgroup_name=workgroup_name_from_host(host))

    profile = profiles.get(host) or profiles.get_default() or ProfileConfig()

    if profile.workgroup_name and not profile.cluster_identifier and not is_provisioned(host):
        return RedshiftConnection(database=database, workgroup_name=profile.workgroup_name)

    if not profile.db_user:
        raise ProfileNotConfiguredError(host, "db user")

    cluster_identifier = (
        cluster_identifier_from_host(host)
        or profile.cluster_identifier
        or redshift_parameters.get("ClusterId")
    )
    if not cluster_identifier:
        raise ProfileNotConfiguredError(host, "cluster identifier")

    return RedshiftConnection(
        database=database,
        cluster_identifier=cluster_identifier,
        db_user=profile.db_user,
    )
