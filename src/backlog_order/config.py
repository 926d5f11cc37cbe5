"""Validator configuration resolved from CLI flags, environment, and YAML files."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import quote

import yaml

from backlog_order.errors import ContractViolation

ORG_URL_ENV_VAR = "AZURE_DEVOPS_ORG_URL"
TOKEN_ENV_VARS = ("AZURE_DEVOPS_EXT_PAT", "AZURE_DEVOPS_PAT")

DEFAULT_BACKLOG_LEVEL = "Microsoft.RequirementCategory"
DEFAULT_API_VERSION = "7.1"
DEFAULT_TIMEOUT_SECONDS = 30

_YAML_KEYS = {
    "org_url",
    "project",
    "team",
    "backlog_level",
    "api_version",
    "timeout_seconds",
    "output_dir",
}


@dataclass(frozen=True)
class SecretValue:
    """Secret payload with redacted representation for console output."""

    name: str
    value: str
    redacted: str

    def __repr__(self) -> str:
        return f"SecretValue(name={self.name!r}, redacted={self.redacted!r})"


@dataclass(frozen=True)
class ValidatorConfig:
    """Explicit run configuration for one backlog validation."""

    organization_url: str
    project: str
    team: str
    token: SecretValue
    backlog_level: str = DEFAULT_BACKLOG_LEVEL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    output_dir: Path | None = None

    def work_item_link(self, item_id: int) -> str:
        """Browser URL of a work item in the tracking service."""

        return (
            f"{self.organization_url}/{quote(self.project)}"
            f"/_workitems/edit/{int(item_id)}"
        )

    def as_dict(self) -> dict[str, object]:
        return {
            "organization_url": self.organization_url,
            "project": self.project,
            "team": self.team,
            "token": self.token.redacted,
            "backlog_level": self.backlog_level,
            "api_version": self.api_version,
            "timeout_seconds": self.timeout_seconds,
            "output_dir": None if self.output_dir is None else str(self.output_dir),
        }


def redact_secret(value: str) -> str:
    if not value:
        return "<missing>"
    if len(value) <= 4:
        return "*" * len(value)
    return f"{value[:2]}{'*' * (len(value) - 4)}{value[-2:]}"


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML document as a dictionary."""

    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ContractViolation(
            "invalid_config_file",
            key=str(path),
            detail=f"cannot read file: {exc.strerror or exc}",
        ) from exc
    except yaml.YAMLError as exc:
        raise ContractViolation(
            "invalid_config_file",
            key=str(path),
            detail=f"invalid YAML: {exc}",
        ) from exc
    if not isinstance(payload, dict):
        raise ContractViolation(
            "invalid_yaml_root",
            key=str(path),
            detail="top-level YAML payload must be a mapping",
        )
    return dict(payload)


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load validator defaults from YAML, rejecting unknown keys and tokens."""

    payload = load_yaml(path)
    if "token" in payload:
        raise ContractViolation(
            "invalid_config_file",
            key=f"{path}:token",
            detail="access tokens must come from --token or the environment",
        )
    unknown = sorted(set(payload) - _YAML_KEYS)
    if unknown:
        raise ContractViolation(
            "invalid_config_file",
            key=str(path),
            detail=f"unrecognized keys: {', '.join(unknown)}",
        )
    return payload


def _as_positive_int(value: object, *, key: str) -> int:
    if isinstance(value, bool):
        raise ContractViolation(
            "invalid_config",
            key=key,
            detail="value must be an integer, not a boolean",
        )
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = int(value.strip())
        except ValueError as exc:
            raise ContractViolation(
                "invalid_config",
                key=key,
                detail="value must be an integer",
            ) from exc
    else:
        raise ContractViolation(
            "invalid_config",
            key=key,
            detail="value must be an integer",
        )
    if parsed < 1:
        raise ContractViolation("invalid_config", key=key, detail="value must be >= 1")
    return parsed


def _first_non_empty(*candidates: object) -> str:
    for candidate in candidates:
        if candidate is None:
            continue
        text = str(candidate).strip()
        if text:
            return text
    return ""


def resolve_config(
    *,
    org_url: str | None = None,
    project: str | None = None,
    team: str | None = None,
    token: str | None = None,
    backlog_level: str | None = None,
    api_version: str | None = None,
    timeout_seconds: int | str | None = None,
    output_dir: str | Path | None = None,
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> ValidatorConfig:
    """Resolve configuration with precedence flag > environment > YAML file.

    Raises ``ContractViolation`` with ``reason_code=missing_config`` naming every
    missing required setting.
    """

    env = os.environ if environ is None else environ
    file_values = load_config_file(config_path) if config_path else {}

    resolved_org = _first_non_empty(
        org_url, env.get(ORG_URL_ENV_VAR), file_values.get("org_url")
    ).rstrip("/")
    resolved_project = _first_non_empty(project, file_values.get("project"))
    resolved_team = _first_non_empty(team, file_values.get("team"))
    token_name = "--token"
    resolved_token = _first_non_empty(token)
    if not resolved_token:
        for env_var in TOKEN_ENV_VARS:
            resolved_token = _first_non_empty(env.get(env_var))
            if resolved_token:
                token_name = env_var
                break

    missing = [
        name
        for name, value in (
            ("org_url", resolved_org),
            ("project", resolved_project),
            ("team", resolved_team),
            ("token", resolved_token),
        )
        if not value
    ]
    if missing:
        raise ContractViolation(
            "missing_config",
            key=",".join(missing),
            detail=(
                f"set --org-url or {ORG_URL_ENV_VAR}, --project, --team, and "
                f"--token or one of {', '.join(TOKEN_ENV_VARS)}"
            ),
        )

    resolved_output = output_dir or file_values.get("output_dir")
    return ValidatorConfig(
        organization_url=resolved_org,
        project=resolved_project,
        team=resolved_team,
        token=SecretValue(
            name=token_name,
            value=resolved_token,
            redacted=redact_secret(resolved_token),
        ),
        backlog_level=_first_non_empty(
            backlog_level, file_values.get("backlog_level"), DEFAULT_BACKLOG_LEVEL
        ),
        api_version=_first_non_empty(
            api_version, file_values.get("api_version"), DEFAULT_API_VERSION
        ),
        timeout_seconds=_as_positive_int(
            timeout_seconds
            if timeout_seconds is not None
            else file_values.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            key="timeout_seconds",
        ),
        output_dir=None if not resolved_output else Path(str(resolved_output)),
    )
