"""Tests for generator configuration loading."""

from pathlib import Path

import pytest

from erlidl.core.errors import LoadError
from erlidl.core.manifest import GeneratorConfig, load_config


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert config == GeneratorConfig()
        assert config.out_dir == Path("gen-erl")
        assert config.indent == 2
        assert config.namespace is None

    def test_reads_erlidl_table(self, tmp_path: Path) -> None:
        path = tmp_path / "erlidl.toml"
        path.write_text(
            "[erlidl]\n"
            'out_dir = "build/erl"\n'
            'namespace = "acme"\n'
            "indent = 4\n"
            'log_level = "info"\n'
        )
        config = load_config(path)
        assert config.out_dir == Path("build/erl")
        assert config.namespace == "acme"
        assert config.indent == 4
        assert config.log_level == "INFO"

    def test_default_file_in_working_directory(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "erlidl.toml").write_text("[erlidl]\nindent = 8\n")
        monkeypatch.chdir(tmp_path)
        assert load_config().indent == 8

    def test_other_tables_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "erlidl.toml"
        path.write_text("[tool]\nindent = 9\n")
        assert load_config(path) == GeneratorConfig()

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="not found"):
            load_config(tmp_path / "nope.toml")

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "erlidl.toml"
        path.write_text("[erlidl\n")
        with pytest.raises(LoadError, match="Invalid config"):
            load_config(path)

    @pytest.mark.parametrize("indent", ["-1", '"two"'])
    def test_invalid_indent(self, tmp_path: Path, indent: str) -> None:
        path = tmp_path / "erlidl.toml"
        path.write_text(f"[erlidl]\nindent = {indent}\n")
        with pytest.raises(LoadError, match="Invalid indent"):
            load_config(path)
