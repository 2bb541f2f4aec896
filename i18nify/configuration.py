"""Prepper-backed configuration loader for i18nify."""

from __future__ import annotations

import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, Mapping, Tuple

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import ConfigurationError
from .rewriter import DEFAULT_TARGET_PATTERN
from .structures import DEFAULT_CALL_NAME

APP_NAME = "i18nify"

CALL_NAME_PATTERN = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")

# (layer, source label, values) in merge order; later layers win.
Layer = Tuple[str, str, Mapping[str, Any]]


class I18nifyConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    I18NIFY_CALL_NAME: str = Field(
        default=DEFAULT_CALL_NAME,
        description="Function inserted around every generated key.",
    )
    I18NIFY_TARGET_PATTERN: str = Field(
        default=DEFAULT_TARGET_PATTERN,
        description="Regular expression matching characters that trigger a rewrite.",
    )
    I18NIFY_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_call_name(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("I18NIFY_CALL_NAME")
            if isinstance(raw_value, str):
                data["I18NIFY_CALL_NAME"] = raw_value.strip()
        return data

    def compiled_pattern(self) -> re.Pattern[str]:
        return re.compile(self.I18NIFY_TARGET_PATTERN)

    def problems(self) -> list[str]:
        """Describe every setting that would break a rewrite run."""

        found: list[str] = []
        if not CALL_NAME_PATTERN.match(self.I18NIFY_CALL_NAME):
            found.append(
                "I18NIFY_CALL_NAME must be an identifier or a dotted member path, "
                f"got {self.I18NIFY_CALL_NAME!r}."
            )
        try:
            self.compiled_pattern()
        except re.error as exc:
            found.append(f"I18NIFY_TARGET_PATTERN is not a valid regular expression: {exc}.")
        return found


def _yaml_layers(base_dir: Path) -> Iterator[Layer]:
    for path, label in discover_file_paths(APP_NAME, "yaml", app_dir=base_dir, extra_paths=None):
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(f"Invalid configuration file {path}: expected a mapping at the root.")
        yield "file", _path_to_source(label, "yaml", path), parsed


def _env_layers(base_dir: Path) -> Iterator[Layer]:
    """Yield one layer per known setting, ``.env`` first and the process environment last."""

    known = set(I18nifyConfig.__field_infos__)
    origins: list[tuple[str, Mapping[str, Any]]] = []
    dotenv_path = base_dir / ".env"
    if dotenv_path.is_file():
        origins.append((".env", dotenv_values(dotenv_path)))
    origins.append(("process", os.environ))

    for origin, values in origins:
        for key in sorted(known & values.keys()):
            if values[key] is not None:
                yield "env", f"env:{origin}:{key}", {key: values[key]}


def _describe_issue(entry: Mapping[str, Any]) -> str:
    path = entry.get("path") or []
    location = ".".join(str(part) for part in path if part) if isinstance(path, (list, tuple)) else str(path)
    message = entry.get("message") or entry.get("msg") or "Invalid value"
    origin = f" (source: {entry['source']})" if entry.get("source") else ""
    return f"{location + ': ' if location else ''}{message}{origin}"


def _report(issues: list[str]) -> ConfigurationError:
    bullet_list = "\n".join(f"- {issue}" for issue in issues)
    return ConfigurationError("Configuration validation errors detected:\n" + bullet_list)


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Merge every configuration layer once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    provenance = ProvenanceRecorder()
    combined: dict[str, Any] = {}
    try:
        for layer, source, values in (*_yaml_layers(base_dir), *_env_layers(base_dir)):
            merge_layer(combined, values, provenance=provenance, source=source, layer=layer)
        model = I18nifyConfig.validate(combined, provenance=provenance)
    except IoError as exc:
        raise ConfigurationError(f"Configuration files could not be read: {exc}") from exc
    except SchemaError as exc:
        raise ConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        raise _report([_describe_issue(entry) for entry in exc.to_dict()]) from exc

    issues = model.problems()
    if issues:
        raise _report(issues)
    return ConfigInstance(model=model, provenance=provenance, env_prefix=None, schema_cls=I18nifyConfig)


def get_settings(app_dir: Path | None = None) -> I18nifyConfig:
    """Return the validated schema model for typed access."""

    return _load_config_instance(app_dir=app_dir).model()
