"""Tests for plantmark.config — models and YAML loader."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from plantmark.config.loader import DEFAULT_CONFIG_TEMPLATE, _expand_env_vars, load_config
from plantmark.config.models import (
    MarkdownConfig,
    OutputConfig,
    PlantmarkConfig,
    RendererConfig,
)


# ── PlantmarkConfig defaults ───────────────────────────────────────


class TestPlantmarkConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_renderer_is_local(self, sample_config):
        assert sample_config.renderer.type == "local"

    def test_failures_not_isolated_by_default(self, sample_config):
        assert sample_config.renderer.isolate_failures is False

    def test_default_output_is_standalone(self, sample_config):
        assert sample_config.output.standalone is True


# ── Individual config models ────────────────────────────────────────


class TestRendererConfig:
    def test_defaults(self):
        cfg = RendererConfig()
        assert cfg.java_path == "java"
        assert cfg.jar_path == "plantuml.jar"
        assert cfg.remote_url == "http://localhost:8080/"
        assert cfg.timeout == 30.0

    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            RendererConfig(type="cloud")

    def test_remote(self):
        cfg = RendererConfig(type="remote", remote_url="https://uml.example.com/")
        assert cfg.type == "remote"


class TestMarkdownConfig:
    def test_csharp_alias_by_default(self):
        assert MarkdownConfig().language_aliases == {"c#": "csharp"}

    def test_toggles(self):
        cfg = MarkdownConfig(emoji=False, source_lines=False)
        assert cfg.emoji is False
        assert cfg.source_lines is False


class TestOutputConfig:
    def test_title_optional(self):
        assert OutputConfig().title is None


# ── _expand_env_vars ────────────────────────────────────────────────


class TestExpandEnvVars:
    @patch.dict(os.environ, {"PLANTUML_JAR": "/opt/plantuml.jar"})
    def test_expands_string(self):
        assert _expand_env_vars("${PLANTUML_JAR}") == "/opt/plantuml.jar"

    @patch.dict(os.environ, {}, clear=True)
    def test_missing_var_becomes_empty(self):
        assert _expand_env_vars("x${NOPE}y") == "xy"

    @patch.dict(os.environ, {"HOST": "uml.local"})
    def test_nested_structures(self):
        raw = {"renderer": {"remote_url": "http://${HOST}/"}, "list": ["${HOST}"]}
        assert _expand_env_vars(raw) == {
            "renderer": {"remote_url": "http://uml.local/"},
            "list": ["uml.local"],
        }

    def test_non_strings_untouched(self):
        assert _expand_env_vars(42) == 42


# ── load_config ─────────────────────────────────────────────────────


class TestLoadConfig:
    def test_returns_defaults_when_no_file_exists(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = load_config()
        assert config.renderer.type == "local"
        assert config.log_level == "info"

    def test_loads_valid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text(
            "renderer:\n  type: remote\n  remote_url: http://uml:8080/\nlog_level: debug\n"
        )
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = load_config()
        assert config.renderer.type == "remote"
        assert config.renderer.remote_url == "http://uml:8080/"
        assert config.log_level == "debug"

    def test_raises_on_invalid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text("  bad:\nyaml: [unterminated")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config()

    def test_raises_on_invalid_config_values(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text("renderer:\n  type: cloud\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ValueError, match="Invalid config"):
            load_config()

    def test_cli_path_takes_priority(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text("renderer:\n  type: remote\n")
        cli_file = tmp_path / "custom.yaml"
        cli_file.write_text("renderer:\n  type: local\n  jar_path: /opt/p.jar\n")

        config = load_config(cli_path=str(cli_file))
        assert config.renderer.type == "local"
        assert config.renderer.jar_path == "/opt/p.jar"

    def test_user_global_config_used_as_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        fake_home = tmp_path / "fakehome"
        (fake_home / ".plantmark").mkdir(parents=True)
        (fake_home / ".plantmark" / "config.yaml").write_text("log_level: debug\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)

        config = load_config()
        assert config.log_level == "debug"

    def test_env_vars_expanded_in_loaded_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MY_JAR", "/srv/plantuml.jar")
        (tmp_path / "plantmark.yaml").write_text("renderer:\n  jar_path: ${MY_JAR}\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")

        config = load_config()
        assert config.renderer.jar_path == "/srv/plantuml.jar"

    def test_empty_yaml_file_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text("")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")

        config = load_config()
        assert config == PlantmarkConfig()

    def test_default_template_is_valid_config(self, tmp_path):
        cfg_file = tmp_path / "plantmark.yaml"
        cfg_file.write_text(DEFAULT_CONFIG_TEMPLATE)
        config = load_config(cli_path=str(cfg_file))

        assert config.renderer.jar_path == str(tmp_path.resolve() / "plantuml.jar")
        defaults = PlantmarkConfig()
        assert config.model_dump(exclude={"renderer": {"jar_path"}}) == defaults.model_dump(
            exclude={"renderer": {"jar_path"}}
        )

    def test_records_source_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "plantmark.yaml").write_text("log_level: debug\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")

        config = load_config()
        assert config.source == (tmp_path / "plantmark.yaml").resolve()
        assert "source" not in config.model_dump()

    def test_defaults_have_no_source(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        assert load_config().source is None

    def test_missing_cli_path_raises(self, tmp_path):
        with pytest.raises(ValueError, match="Config file not found"):
            load_config(cli_path=str(tmp_path / "nope.yaml"))

    def test_non_mapping_yaml_rejected(self, tmp_path):
        cfg_file = tmp_path / "list.yaml"
        cfg_file.write_text("- renderer\n- markdown\n")
        with pytest.raises(ValueError, match="expected a mapping"):
            load_config(cli_path=str(cfg_file))


# ── jar_path resolution ─────────────────────────────────────────────


class TestJarPathResolution:
    def test_relative_jar_resolved_against_config_dir(self, tmp_path, monkeypatch):
        project = tmp_path / "project"
        (project / "tools").mkdir(parents=True)
        cfg_file = project / "plantmark.yaml"
        cfg_file.write_text("renderer:\n  jar_path: tools/plantuml.jar\n")
        monkeypatch.chdir(tmp_path)

        config = load_config(cli_path=str(cfg_file))
        assert config.renderer.jar_path == str(project.resolve() / "tools" / "plantuml.jar")

    def test_user_global_jar_resolved_against_its_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        fake_home = tmp_path / "fakehome"
        (fake_home / ".plantmark").mkdir(parents=True)
        (fake_home / ".plantmark" / "config.yaml").write_text(
            "renderer:\n  jar_path: plantuml.jar\n"
        )
        monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)

        config = load_config()
        assert config.renderer.jar_path == str(
            (fake_home / ".plantmark").resolve() / "plantuml.jar"
        )

    def test_absolute_jar_untouched(self, tmp_path):
        cfg_file = tmp_path / "plantmark.yaml"
        cfg_file.write_text("renderer:\n  jar_path: /opt/plantuml/plantuml.jar\n")
        config = load_config(cli_path=str(cfg_file))
        assert config.renderer.jar_path == "/opt/plantuml/plantuml.jar"

    def test_home_relative_jar_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path / "home"))
        cfg_file = tmp_path / "plantmark.yaml"
        cfg_file.write_text("renderer:\n  jar_path: ~/lib/plantuml.jar\n")
        config = load_config(cli_path=str(cfg_file))
        assert config.renderer.jar_path == str(tmp_path / "home" / "lib" / "plantuml.jar")

    def test_jar_not_in_file_keeps_default(self, tmp_path):
        cfg_file = tmp_path / "plantmark.yaml"
        cfg_file.write_text("log_level: debug\n")
        config = load_config(cli_path=str(cfg_file))
        assert config.renderer.jar_path == "plantuml.jar"
