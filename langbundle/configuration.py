"""Layered configuration loader for the language bundle builder."""

from __future__ import annotations

import codecs
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigurationError

APP_NAME = "langbundle"
LOCAL_CONFIG_NAME = f"{APP_NAME}.yaml"


class LangBundleConfig(BaseModel):
    """Schema describing all supported configuration options."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    LANGBUNDLE_ORIGINAL_ENCODING: str = Field(
        default="latin-1",
        description="Single-byte encoding of the original-language dump.",
        validate_default=True,
    )
    LANGBUNDLE_TRANSLATED_ENCODING: str = Field(
        default="cp949",
        description="Multi-byte encoding of the translated dump and its bundle strings.",
        validate_default=True,
    )
    LANGBUNDLE_VERBOSE: bool = Field(default=False)
    LANGBUNDLE_DEBUG: bool = Field(default=False)

    @field_validator("LANGBUNDLE_ORIGINAL_ENCODING", "LANGBUNDLE_TRANSLATED_ENCODING", mode="before")
    @classmethod
    def _normalise_encoding(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return codecs.lookup(value.strip()).name
            except LookupError as exc:
                raise ValueError(f"Unknown text encoding '{value}'.") from exc
        return value


def discover_file_paths(app_dir: Path) -> list[Path]:
    """Return existing YAML configuration files, lowest precedence first."""

    candidates = [
        Path.home() / ".config" / APP_NAME / "config.yaml",
        app_dir / LOCAL_CONFIG_NAME,
    ]
    return [path for path in candidates if path.is_file()]


@lru_cache(maxsize=1)
def _load_settings(app_dir: Path | None = None) -> LangBundleConfig:
    """Load configuration layers once and cache the validated model."""

    base_dir = app_dir or Path.cwd()
    combined = _load_discovered_yaml(app_dir=base_dir)
    _merge_env_sources(combined, app_dir=base_dir, schema=LangBundleConfig)

    try:
        return LangBundleConfig.model_validate(combined)
    except ValidationError as exc:
        issues = _format_validation_errors(exc.errors())
        raise ConfigurationError(issues) from exc


def _load_discovered_yaml(*, app_dir: Path) -> dict[str, Any]:
    """Merge the discovered YAML files into one mapping."""

    result: dict[str, Any] = {}
    for path in discover_file_paths(app_dir):
        try:
            with path.open("r", encoding="utf-8") as handle:
                parsed = yaml.safe_load(handle)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigurationError(
                f"Configuration files could not be read: {path}: {exc}"
            ) from exc
        if parsed is None:
            continue
        if not isinstance(parsed, Mapping):
            raise ConfigurationError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        result.update(parsed)
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    app_dir: Path,
    schema: type[BaseModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.model_fields.keys())

    def merge_values(values: Mapping[str, str | None]) -> None:
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key not in allowed:
                continue
            target[key] = value

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        merge_values(dotenv_values(dotenv_path))

    merge_values({k: v for k, v in os.environ.items() if isinstance(v, str)})


def _format_validation_errors(entries: Sequence[Mapping[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("loc") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("msg") or "Invalid value")
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_settings(app_dir: Path | None = None) -> LangBundleConfig:
    """Return the validated configuration model."""

    return _load_settings(app_dir=app_dir)
