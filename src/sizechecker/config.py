"""Configuration system for the sizechecker application.

A check is fully described by one immutable CheckerConfig built once at
startup and passed explicitly into every component. Values come from the
command line, optionally layered over a YAML file whose string values may
reference environment variables as ``${NAME}``. Command-line values win.

Validation is fail-fast: every problem is reported as a ConfigurationError
with an actionable message before any directory is probed.
"""

import os
import re
from collections.abc import Mapping
from datetime import timedelta
from pathlib import Path
from typing import Annotated, Final

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sizechecker.types.models import RunType
from sizechecker.utils.formatting import (
    DurationParseError,
    SizeParseError,
    parse_duration,
    parse_size,
)

# Matches ${VARIABLE_NAME} where VARIABLE_NAME contains letters, digits and underscores
ENV_VAR_PATTERN: Final[re.Pattern[str]] = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

DEFAULT_COOLDOWN: Final[timedelta] = timedelta(minutes=1)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""


class EnvironmentVariableError(Exception):
    """Raised when a ``${NAME}`` reference names an unset environment variable."""


class FileSettings(BaseModel):
    """Optional defaults read from a YAML configuration file.

    Every key mirrors a command-line option. Unknown keys are rejected so
    that typos do not silently fall back to defaults.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    limit: str | None = None
    runtype: RunType | None = None
    discord: str | None = None
    pushover: str | None = None
    cooldown: str | None = None
    state_dir: Path | None = None
    log_level: str | None = None
    syslog: bool | None = None
    dry_run: bool | None = None

    @field_validator("limit", "cooldown", mode="before")
    @classmethod
    def coerce_scalar_to_string(cls, value: object) -> object:
        """Accept bare YAML numbers such as ``limit: 1024`` or ``cooldown: 0``."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class CheckerConfig(BaseModel):
    """Complete, validated description of one check run."""

    model_config = ConfigDict(frozen=True)

    path: Annotated[Path, Field(description="Directory to check")]
    limit_bytes: Annotated[
        int,
        Field(ge=0, description="Threshold in bytes: maximum used or minimum available"),
    ]
    run_type: Annotated[RunType, Field(description="Used-space or available-space mode")]
    discord_webhook: Annotated[
        str | None,
        Field(description="Discord webhook URL, None when not configured"),
    ] = None
    pushover_destination: Annotated[
        str | None,
        Field(description="Pushover destination label, None when not configured"),
    ] = None
    cooldown: Annotated[
        timedelta,
        Field(description="Minimum interval between notifications per destination"),
    ] = DEFAULT_COOLDOWN
    state_dir: Annotated[
        Path | None,
        Field(description="Directory for cooldown records, system temp dir when None"),
    ] = None
    dry_run: Annotated[bool, Field(description="Evaluate and gate, but do not send")] = False
    log_level: Annotated[
        str,
        Field(description="Logging level", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$"),
    ] = "INFO"
    syslog_enabled: Annotated[bool, Field(description="Also log to the local syslog socket")] = False

    @field_validator("discord_webhook", "pushover_destination", mode="before")
    @classmethod
    def empty_destination_is_unset(cls, value: object) -> object:
        """Treat an empty destination string the same as an absent one."""
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cooldown", mode="after")
    @classmethod
    def validate_cooldown_not_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            msg = "Cooldown must not be negative"
            raise ValueError(msg)
        return value

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


def resolve_env_var(value: str, environ: Mapping[str, str] | None = None) -> str:
    """Resolve ``${NAME}`` references in a string value.

    Examples:
        >>> resolve_env_var("${HOOK}", {"HOOK": "https://example.com/hook"})
        'https://example.com/hook'
        >>> resolve_env_var("no variables here", {})
        'no variables here'

    Raises:
        EnvironmentVariableError: If a referenced variable is not set
    """
    env = os.environ if environ is None else environ

    def replace_match(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = env.get(var_name)
        if env_value is None:
            msg = f"Required environment variable '{var_name}' is not set."
            raise EnvironmentVariableError(msg)
        return env_value

    return ENV_VAR_PATTERN.sub(replace_match, value)


def resolve_env_vars_in_dict(
    data: Mapping[str, object],
    environ: Mapping[str, str] | None = None,
) -> dict[str, object]:
    """Recursively resolve environment variables in string values of a mapping.

    Raises:
        EnvironmentVariableError: If a referenced variable is not set
    """
    result: dict[str, object] = {}

    for key, value in data.items():
        if isinstance(value, str):
            result[key] = resolve_env_var(value, environ)
        elif isinstance(value, dict):
            # YAML data is untyped at load time; validated by Pydantic after resolution
            result[key] = resolve_env_vars_in_dict(value, environ)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
        elif isinstance(value, list):
            result[key] = [
                resolve_env_var(item, environ) if isinstance(item, str) else item  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
                for item in value  # pyright: ignore[reportUnknownVariableType]  # YAML boundary
            ]
        else:
            result[key] = value

    return result


def format_validation_error(error: ValidationError, *, heading: str, source: str | None = None) -> str:
    """Render a pydantic ValidationError as field-level diagnostics."""
    error_lines = [heading, ""]
    for detail in error.errors():
        field_path = " → ".join(str(loc) for loc in detail["loc"]) or "(root)"
        error_lines.append(f"  Field: {field_path}")
        error_lines.append(f"  Error: {detail['msg']}")
        error_lines.append("")

    if source is not None:
        error_lines.append(f"Configuration source: {source}")
    return "\n".join(error_lines).rstrip()


def load_config_file(config_path: Path, environ: Mapping[str, str] | None = None) -> FileSettings:
    """Load and validate the optional YAML configuration file.

    Args:
        config_path: Path to the YAML file
        environ: Environment used for ``${NAME}`` resolution

    Returns:
        Validated file settings; an empty file yields all-None settings

    Raises:
        ConfigurationError: If the file cannot be read, parsed, resolved or validated
    """
    if not config_path.is_file():
        msg = f"Configuration file not found: {config_path}"
        raise ConfigurationError(msg)

    try:
        with config_path.open("r", encoding="utf-8") as f:
            raw_data: object = yaml.safe_load(f)  # pyright: ignore[reportAny]  # YAML boundary
    except yaml.YAMLError as e:
        msg = f"Failed to parse YAML configuration file: {config_path}\nYAML parsing error: {e}"
        raise ConfigurationError(msg) from e
    except OSError as e:
        msg = f"Failed to read configuration file: {config_path}\nError: {e}"
        raise ConfigurationError(msg) from e

    if raw_data is None:
        return FileSettings()

    if not isinstance(raw_data, dict):
        msg = (
            f"Invalid configuration file format: {config_path}\n"
            f"Expected YAML dictionary at root level, got: {type(raw_data).__name__}"
        )
        raise ConfigurationError(msg)

    try:
        resolved_data = resolve_env_vars_in_dict(raw_data, environ)  # pyright: ignore[reportUnknownArgumentType]  # YAML boundary
    except EnvironmentVariableError as e:
        msg = f"Environment variable resolution failed in: {config_path}\n{e}"
        raise ConfigurationError(msg) from e

    try:
        return FileSettings.model_validate(resolved_data)
    except ValidationError as e:
        msg = format_validation_error(
            e,
            heading="Configuration validation failed:",
            source=str(config_path),
        )
        raise ConfigurationError(msg) from e


def build_config(
    *,
    path: Path | str,
    limit: str | None,
    runtype: str | None,
    discord: str | None = None,
    pushover: str | None = None,
    cooldown: str | None = None,
    dry_run: bool = False,
    log_level: str | None = None,
    syslog: bool = False,
    file_settings: FileSettings | None = None,
) -> CheckerConfig:
    """Merge command-line values over file settings into a CheckerConfig.

    String values are parsed here: the limit through parse_size (after
    stripping whitespace) and the cooldown through parse_duration.

    Raises:
        ConfigurationError: If a required value is missing or any value is invalid
    """
    settings = file_settings or FileSettings()

    limit_text = limit if limit is not None else settings.limit
    if not limit_text:
        msg = "--limit flag is required."
        raise ConfigurationError(msg)

    runtype_text = runtype if runtype is not None else settings.runtype
    if runtype_text not in (RunType.USED.value, RunType.AVAILABLE.value):
        msg = "--runtype flag must be 'u' for used space or 'a' for available space."
        raise ConfigurationError(msg)

    try:
        limit_bytes = parse_size(limit_text)
    except SizeParseError as e:
        msg = f"Error parsing limit size: {e}"
        raise ConfigurationError(msg) from e

    cooldown_text = cooldown if cooldown is not None else settings.cooldown
    try:
        cooldown_value = parse_duration(cooldown_text) if cooldown_text is not None else DEFAULT_COOLDOWN
    except DurationParseError as e:
        msg = f"Error parsing cooldown: {e}"
        raise ConfigurationError(msg) from e

    try:
        return CheckerConfig(
            path=Path(path),
            limit_bytes=limit_bytes,
            run_type=RunType(runtype_text),
            discord_webhook=discord if discord is not None else settings.discord,
            pushover_destination=pushover if pushover is not None else settings.pushover,
            cooldown=cooldown_value,
            state_dir=settings.state_dir,
            dry_run=dry_run or bool(settings.dry_run),
            log_level=log_level or settings.log_level or "INFO",
            syslog_enabled=syslog or bool(settings.syslog),
        )
    except ValidationError as e:
        raise ConfigurationError(format_validation_error(e, heading="Invalid configuration:")) from e
