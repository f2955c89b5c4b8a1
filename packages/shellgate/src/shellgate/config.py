"""Run settings: built-in pins, optional repo YAML file, environment overrides.

Precedence, lowest first: defaults below, ``configs/shellgate.yaml`` in the
repository (or an explicit ``--config`` path), ``SHELLGATE_*`` environment
variables, then CLI flags applied by the caller through ``Settings.replace``.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .core.env import getenv, getenv_int
from .errors import ConfigError

DEFAULT_CONFIG_PATH = Path("configs/shellgate.yaml")
SCHEMA_PATH = Path(__file__).resolve().parent / "schemas" / "config.schema.json"

# keep shellcheck_version and shellcheck_image in sync
SHELLCHECK_VERSION = "0.6.0"
SHELLCHECK_IMAGE = (
    "koalaman/shellcheck-alpine:v0.6.0"
    "@sha256:7d4d712a2686da99d37580b4e2f45eb658b74e4b01caf67c1099adc294b96b52"
)
SHELLCHECK_DOWNLOAD_URL = "https://storage.googleapis.com/shellcheck/shellcheck-v{version}.{os}.{arch}.tar.xz"

# SC2230: `which` is non-standard, use `command -v`
DISABLED_CODES = ("2230",)

EXCLUDE_PATTERNS = (
    "_*",
    ".git*",
    "vendor*",
    "third_party*",
)
INCLUDE_PATTERNS = ("third_party/forked*",)

_ENV_OVERRIDES = {
    "SHELLGATE_SHELLCHECK_VERSION": "shellcheck_version",
    "SHELLGATE_SHELLCHECK_IMAGE": "shellcheck_image",
    "SHELLGATE_CONTAINER_RUNTIME": "container_runtime",
}


@dataclass(frozen=True)
class Settings:
    shellcheck_executable: str = "shellcheck"
    shellcheck_version: str = SHELLCHECK_VERSION
    shellcheck_image: str = SHELLCHECK_IMAGE
    container_name: str = "shellgate-shellcheck"
    container_runtime: str = "docker"
    disabled_codes: tuple[str, ...] = DISABLED_CODES
    extensions: tuple[str, ...] = (".sh",)
    exclude: tuple[str, ...] = EXCLUDE_PATTERNS
    include: tuple[str, ...] = INCLUDE_PATTERNS
    allowlist_path: str = "hack/.shellcheck_failures"
    tool_cache_dir: str = "_output/bin"
    download_url: str = SHELLCHECK_DOWNLOAD_URL
    jobs: int = 1
    timeout_seconds: int = 0

    def replace(self, **changes: Any) -> "Settings":
        return dataclasses.replace(self, **{k: v for k, v in changes.items() if v is not None})

    def allowlist_file(self, repo_root: Path) -> Path:
        return _under(repo_root, self.allowlist_path)

    def tool_cache(self, repo_root: Path) -> Path:
        return _under(repo_root, self.tool_cache_dir)


def _under(repo_root: Path, configured: str) -> Path:
    raw = Path(configured)
    return raw if raw.is_absolute() else repo_root / raw


def load_yaml(path: Path) -> Any:
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def validate_config(payload: dict[str, Any], source: str) -> None:
    import jsonschema

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    try:
        jsonschema.validate(payload, schema)
    except jsonschema.ValidationError as exc:
        where = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise ConfigError(f"{source}: schema violation at {where}: {exc.message}") from exc


def _from_payload(payload: dict[str, Any]) -> dict[str, Any]:
    fields = {f.name for f in dataclasses.fields(Settings)}
    out: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in fields:
            continue
        out[key] = tuple(str(item) for item in value) if isinstance(value, list) else value
    return out


def load_settings(repo_root: Path, config_path: str | None = None) -> Settings:
    explicit = config_path is not None
    path = _under(repo_root, config_path) if explicit else repo_root / DEFAULT_CONFIG_PATH
    values: dict[str, Any] = {}
    if path.is_file():
        try:
            payload = load_yaml(path)
        except Exception as exc:
            raise ConfigError(f"{path}: unable to parse YAML: {exc}") from exc
        payload = payload or {}
        if not isinstance(payload, dict):
            raise ConfigError(f"{path}: root must be a mapping")
        validate_config(payload, str(path))
        values.update(_from_payload(payload))
    elif explicit:
        raise ConfigError(f"config file not found: {path}")

    for env_name, field in _ENV_OVERRIDES.items():
        raw = getenv(env_name)
        if raw:
            values[field] = raw
    try:
        values["jobs"] = getenv_int("SHELLGATE_JOBS", int(values.get("jobs", 1)))
    except ValueError as exc:
        raise ConfigError(f"SHELLGATE_JOBS must be an integer: {exc}") from exc
    if values["jobs"] < 1:
        raise ConfigError("jobs must be >= 1")
    return Settings(**values)
