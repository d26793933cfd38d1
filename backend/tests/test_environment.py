"""Tests for hosting environment detection and storage settings."""

from dataclasses import FrozenInstanceError

import pytest

from utils.constants import CSV_FILE_NAME, EXCEL_FILE_NAME, JSON_FILE_NAME
from utils.environment import (
    HOSTING_MARKERS,
    StorageSettings,
    PROJECT_ROOT,
    classify,
    get_environment_name,
    resolve_project_root,
)


@pytest.fixture
def project_root(tmp_path):
    """A project directory containing the marker file."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    return root


class TestClassify:
    """Test cases for classify()."""

    def test_local_when_no_markers(self, project_root):
        info = classify({}, project_root)
        assert info.hosting is False
        assert info.platform == "local"
        assert info.environment == "development"

    @pytest.mark.parametrize("variable,platform", HOSTING_MARKERS)
    def test_platform_markers(self, project_root, variable, platform):
        info = classify({variable: "1"}, project_root)
        assert info.hosting is True
        assert info.platform == platform

    def test_empty_marker_ignored(self, project_root):
        assert classify({"VERCEL": ""}, project_root).hosting is False

    def test_production_flag(self, project_root):
        info = classify({"NODE_ENV": "production"}, project_root)
        assert info.hosting is True
        assert info.platform == "production"
        assert info.is_production is True

    def test_missing_project_marker(self, tmp_path):
        info = classify({}, tmp_path)
        assert info.hosting is True
        assert info.platform == "unknown-host"

    def test_environment_name_prefers_environment(self):
        env = {"ENVIRONMENT": "Staging", "NODE_ENV": "production"}
        assert get_environment_name(env) == "staging"


class TestResolveProjectRoot:
    """Test cases for resolve_project_root()."""

    def test_variable_wins(self, project_root):
        env = {"FEEDBACK_PROJECT_ROOT": str(project_root)}
        assert resolve_project_root(env) == project_root

    def test_source_checkout_used_when_marker_present(self):
        assert (PROJECT_ROOT / "pyproject.toml").exists()
        assert resolve_project_root({}) == PROJECT_ROOT

    def test_falls_back_to_cwd_outside_checkout(
        self, monkeypatch, project_root, tmp_path
    ):
        monkeypatch.setattr("utils.environment.PROJECT_ROOT", tmp_path / "site-packages")
        monkeypatch.chdir(project_root)
        assert resolve_project_root({}).resolve() == project_root.resolve()
        assert classify({}).hosting is False

    def test_installed_copy_with_variable_is_local(
        self, monkeypatch, project_root, tmp_path
    ):
        monkeypatch.setattr("utils.environment.PROJECT_ROOT", tmp_path / "site-packages")
        env = {"FEEDBACK_PROJECT_ROOT": str(project_root)}
        settings = StorageSettings.from_environment(env)
        assert settings.hosting is False
        assert settings.data_dir == project_root / "data"


class TestStorageSettings:
    """Test cases for StorageSettings."""

    def test_paths_derived_from_data_dir(self, tmp_path):
        settings = StorageSettings(data_dir=tmp_path)
        assert settings.excel_path == tmp_path / EXCEL_FILE_NAME
        assert settings.json_path == tmp_path / JSON_FILE_NAME
        assert settings.csv_path == tmp_path / CSV_FILE_NAME

    def test_local_uses_project_data_dir(self, project_root):
        settings = StorageSettings.from_environment({}, project_root)
        assert settings.hosting is False
        assert settings.data_dir == project_root / "data"

    def test_local_data_dir_override(self, project_root, tmp_path):
        settings = StorageSettings.from_environment(
            {"FEEDBACK_DATA_DIR": str(tmp_path / "custom")}, project_root
        )
        assert settings.data_dir == tmp_path / "custom"

    def test_hosted_uses_scratch_dir(self, project_root, tmp_path):
        settings = StorageSettings.from_environment(
            {"RENDER": "true", "FEEDBACK_TMP_DIR": str(tmp_path / "scratch")},
            project_root,
        )
        assert settings.hosting is True
        assert settings.platform == "render"
        assert settings.data_dir == tmp_path / "scratch"

    def test_hosted_default_is_temp_dir(self, project_root):
        settings = StorageSettings.from_environment({"DYNO": "web.1"}, project_root)
        assert settings.data_dir.name == "feedback-collector"
        assert settings.data_dir != project_root / "data"

    def test_settings_are_frozen(self, tmp_path):
        settings = StorageSettings(data_dir=tmp_path)
        with pytest.raises(FrozenInstanceError):
            settings.hosting = True
