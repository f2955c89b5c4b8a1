from __future__ import annotations

from pathlib import Path

import pytest

from shellgate.config import SHELLCHECK_IMAGE, Settings, load_settings
from shellgate.errors import ConfigError
from shellgate.exit_codes import ERR_CONFIG


def _write_config(repo_root: Path, text: str, rel: str = "configs/shellgate.yaml") -> Path:
    path = repo_root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_config_file(repo_root: Path) -> None:
    settings = load_settings(repo_root)
    assert settings == Settings()
    assert settings.shellcheck_version == "0.6.0"
    assert settings.shellcheck_image == SHELLCHECK_IMAGE
    assert settings.allowlist_file(repo_root) == repo_root / "hack/.shellcheck_failures"
    assert settings.tool_cache(repo_root) == repo_root / "_output/bin"


def test_yaml_overrides_defaults(repo_root: Path) -> None:
    _write_config(
        repo_root,
        "schema_version: 1\n"
        "jobs: 4\n"
        "disabled_codes: ['2230', 'SC1090']\n"
        "extensions: ['.sh', '.bash']\n"
        "allowlist_path: ci/shellcheck-allowlist.txt\n",
    )
    settings = load_settings(repo_root)
    assert settings.jobs == 4
    assert settings.disabled_codes == ("2230", "SC1090")
    assert settings.extensions == (".sh", ".bash")
    assert settings.allowlist_file(repo_root) == repo_root / "ci/shellcheck-allowlist.txt"


def test_empty_yaml_file_keeps_defaults(repo_root: Path) -> None:
    _write_config(repo_root, "")
    assert load_settings(repo_root) == Settings()


@pytest.mark.parametrize(
    "text",
    [
        "jobs: 0\n",
        "unknown_key: true\n",
        "shellcheck_image: koalaman/shellcheck:latest\n",
        "disabled_codes: ['not-a-code']\n",
    ],
)
def test_schema_violations_are_config_errors(repo_root: Path, text: str) -> None:
    _write_config(repo_root, text)
    with pytest.raises(ConfigError) as excinfo:
        load_settings(repo_root)
    assert excinfo.value.code == ERR_CONFIG
    assert "schema violation" in str(excinfo.value)


def test_non_mapping_root_is_rejected(repo_root: Path) -> None:
    _write_config(repo_root, "- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        load_settings(repo_root)


def test_explicit_missing_config_is_an_error(repo_root: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_settings(repo_root, "configs/missing.yaml")


def test_explicit_config_path(repo_root: Path) -> None:
    _write_config(repo_root, "container_runtime: podman\n", rel="ci/gate.yaml")
    assert load_settings(repo_root, "ci/gate.yaml").container_runtime == "podman"


def test_environment_overrides_file(repo_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _write_config(repo_root, "shellcheck_version: 0.7.0\njobs: 2\n")
    monkeypatch.setenv("SHELLGATE_SHELLCHECK_VERSION", "0.9.0")
    monkeypatch.setenv("SHELLGATE_JOBS", "8")
    settings = load_settings(repo_root)
    assert settings.shellcheck_version == "0.9.0"
    assert settings.jobs == 8


def test_bad_jobs_env_is_config_error(repo_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHELLGATE_JOBS", "many")
    with pytest.raises(ConfigError, match="SHELLGATE_JOBS"):
        load_settings(repo_root)


def test_replace_ignores_unset_overrides() -> None:
    settings = Settings(jobs=3)
    assert settings.replace(jobs=None).jobs == 3
    assert settings.replace(jobs=5).jobs == 5
