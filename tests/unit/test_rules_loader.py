"""
Rules loader tests.

Tests for loading and validating rules.yaml into AssetRules.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from docassets.rules import (
    RULES_ENV_VAR,
    AssetRules,
    load_rules,
    resolve_rules,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestLoadRules:
    """Loading a rules file."""

    def test_load_project_rules_file(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml")

        assert rules.paths.public_dir == "public/assets"
        assert rules.locales.supported == ["en", "es", "pt"]
        assert rules.locales.default == "en"
        assert rules.security.max_file_size == 10 * 1024 * 1024
        assert rules.optimization.modern_formats.avif.quality == 80
        assert rules.manifest_relpath == "public/assets/assets-manifest.json"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(tmp_path / "rules.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("paths: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_non_mapping_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="mapping"):
            load_rules(path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("")

        assert load_rules(path) == AssetRules()

    def test_partial_file_keeps_other_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("concurrency:\n  max_workers: 2\n")

        rules = load_rules(path)

        assert rules.concurrency.max_workers == 2
        assert rules.paths.content_dir == "content"


class TestValidation:
    """Schema constraints."""

    def test_default_locale_must_be_supported(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("locales:\n  supported: [en, es]\n  default: pt\n")

        with pytest.raises(ValueError, match="validation failed"):
            load_rules(path)

    def test_workers_must_be_positive(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("concurrency:\n  max_workers: 0\n")

        with pytest.raises(ValueError):
            load_rules(path)

    def test_public_dir_slashes_are_stripped(self) -> None:
        rules = AssetRules.model_validate({"paths": {"public_dir": "/static/assets/"}})
        assert rules.paths.public_dir == "static/assets"

    def test_quality_range(self) -> None:
        with pytest.raises(ValueError):
            AssetRules.model_validate({"optimization": {"responsive": {"quality": 101}}})


class TestResolveRules:
    """Choosing the rules file."""

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.yaml"
        path.write_text("locales:\n  supported: [en, fr]\n  default: fr\n")

        assert resolve_rules(path).locales.default == "fr"

    def test_env_var(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "env.yaml"
        path.write_text("concurrency:\n  max_workers: 3\n")
        monkeypatch.setenv(RULES_ENV_VAR, str(path))

        assert resolve_rules().concurrency.max_workers == 3

    def test_explicit_missing_file_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(RULES_ENV_VAR, raising=False)
        with pytest.raises(FileNotFoundError):
            resolve_rules(tmp_path / "missing.yaml")

    def test_defaults_without_any_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv(RULES_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)

        assert resolve_rules() == AssetRules()
