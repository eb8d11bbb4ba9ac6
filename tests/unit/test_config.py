"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from grammardocs.core.config import DocsConfig, GraphConfig, find_config_file, load_config
from grammardocs.core.errors import ConfigError


class TestDefaults:
    def test_defaults(self) -> None:
        config = DocsConfig()
        assert config.formatter == "markdown"
        assert config.output_dir == Path("docs/grammar")
        assert config.search_paths == []
        assert config.include_syntax
        assert config.graph == GraphConfig()
        assert config.graph.enabled
        assert not config.graph.deduplicate_edges

    def test_formatter_options(self) -> None:
        config = DocsConfig(
            include_syntax=False,
            graph=GraphConfig(deduplicate_edges=True, direction="TB"),
        )
        options = config.formatter_options()
        assert not options.include_syntax
        assert options.deduplicate_edges
        assert options.graph_direction == "TB"


class TestLoadConfig:
    def test_grammardocs_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "grammardocs.toml"
        config_file.write_text(
            """
[grammardocs]
formatter = "text"
output_dir = "out"
search_paths = ["grammars", "vendor"]
include_syntax = false

[grammardocs.graph]
enabled = false
deduplicate_edges = true
direction = "RL"
"""
        )
        config = load_config(config_file)
        assert config.formatter == "text"
        assert config.output_dir == tmp_path / "out"
        assert config.search_paths == [tmp_path / "grammars", tmp_path / "vendor"]
        assert not config.include_syntax
        assert config.graph == GraphConfig(enabled=False, deduplicate_edges=True, direction="RL")

    def test_pyproject_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n[tool.grammardocs]\nformatter = "dot"\n'
        )
        nested = tmp_path / "src" / "grammars"
        nested.mkdir(parents=True)

        assert find_config_file(nested) == (tmp_path / "pyproject.toml").resolve()
        config = load_config(start=nested)
        assert config.formatter == "dot"
        assert config.output_dir == tmp_path.resolve() / "docs/grammar"

    def test_grammardocs_toml_wins(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text('[tool.grammardocs]\nformatter = "dot"\n')
        (tmp_path / "grammardocs.toml").write_text('[grammardocs]\nformatter = "text"\n')
        assert load_config(start=tmp_path).formatter == "text"

    def test_pyproject_without_table_is_skipped(self, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()
        (project / "pyproject.toml").write_text('[project]\nname = "x"\n')
        (tmp_path / "grammardocs.toml").write_text('[grammardocs]\nformatter = "text"\n')
        assert find_config_file(project) == (tmp_path / "grammardocs.toml").resolve()

    def test_empty_table_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "grammardocs.toml"
        config_file.write_text("")
        config = load_config(config_file)
        assert config.formatter == "markdown"
        assert config.output_dir == tmp_path / "docs/grammar"


class TestConfigErrors:
    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "grammardocs.toml"
        config_file.write_text("[grammardocs\nformatter = ")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(config_file)

    def test_invalid_direction(self, tmp_path: Path) -> None:
        config_file = tmp_path / "grammardocs.toml"
        config_file.write_text('[grammardocs.graph]\ndirection = "diagonal"\n')
        with pytest.raises(ConfigError) as exc_info:
            load_config(config_file)
        assert "graph.direction" in exc_info.value.message

    def test_unknown_key(self, tmp_path: Path) -> None:
        config_file = tmp_path / "grammardocs.toml"
        config_file.write_text('[grammardocs]\nformater = "text"\n')
        with pytest.raises(ConfigError, match="formater"):
            load_config(config_file)
