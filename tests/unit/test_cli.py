"""Tests for the erlidl command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from erlidl.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every command away from any erlidl.toml in the repository."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "erlidl version" in result.output


class TestGenerateCommand:
    def test_writes_artifacts(self, fixtures_dir: Path, tmp_path: Path) -> None:
        out = tmp_path / "gen"
        result = runner.invoke(app, ["generate", str(fixtures_dir / "tutorial.json"), "-o", str(out)])

        assert result.exit_code == 0, result.output
        assert (out / "tutorial_types.hrl").exists()
        assert (out / "calculator_service.erl").exists()
        assert f"Generated: {out / 'tutorial_constants.hrl'}" in result.output

    def test_default_output_directory(self, fixtures_dir: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["generate", str(fixtures_dir / "tutorial.json")])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "gen-erl" / "tutorial_types.erl").exists()

    def test_config_file(self, fixtures_dir: Path, tmp_path: Path) -> None:
        (tmp_path / "erlidl.toml").write_text('[erlidl]\nout_dir = "cfg-out"\nnamespace = "acme"\n')
        result = runner.invoke(app, ["generate", str(fixtures_dir / "tutorial.json")])
        assert result.exit_code == 0, result.output
        assert (tmp_path / "cfg-out" / "acme_tutorial_types.erl").exists()

    def test_namespace_option_overrides_config(self, fixtures_dir: Path, tmp_path: Path) -> None:
        (tmp_path / "erlidl.toml").write_text('[erlidl]\nnamespace = "acme"\n')
        result = runner.invoke(
            app, ["generate", str(fixtures_dir / "tutorial.json"), "-n", "corp", "-o", "out"]
        )
        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "corp_tutorial_types.erl").exists()

    def test_missing_document(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["generate", str(tmp_path / "nope.json")])
        assert result.exit_code == 1
        assert "Error: Program document not found" in result.output

    def test_generation_error(self, tmp_path: Path) -> None:
        doc = tmp_path / "bad.json"
        doc.write_text(
            '{"name": "bad", "structs": [{"name": "S", "fields": '
            '[{"id": 1, "name": "e", "type": "E"}]}], '
            '"enums": [{"name": "E", "values": [{"name": "A"}, {"name": "a"}]}]}'
        )
        result = runner.invoke(app, ["generate", str(doc)])
        assert result.exit_code == 1
        assert "enum 'E' in program bad" in result.output
        assert not (tmp_path / "gen-erl").exists()

    def test_missing_config(self, fixtures_dir: Path) -> None:
        result = runner.invoke(
            app, ["generate", str(fixtures_dir / "tutorial.json"), "-c", "missing.toml"]
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestDescribeCommand:
    def test_struct(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["describe", str(fixtures_dir / "tutorial.json"), "Work"])
        assert result.exit_code == 0, result.output
        assert result.output == (
            "{struct, [\n"
            "  {1, i32},\n"
            "  {2, i32},\n"
            "  {3, {enum, {'tutorial_types', 'operation'}}},\n"
            "  {4, string}\n"
            "]}\n"
        )

    def test_struct_extended(self, fixtures_dir: Path) -> None:
        result = runner.invoke(
            app, ["describe", str(fixtures_dir / "tutorial.json"), "Work", "--extended"]
        )
        assert result.exit_code == 0, result.output
        assert "{1, undefined, i32, 'num1', 0}" in result.output
        assert "{4, optional, string, 'comment', undefined}" in result.output

    def test_enum(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["describe", str(fixtures_dir / "tutorial.json"), "Operation"])
        assert result.exit_code == 0, result.output
        assert result.output == "{enum, {'tutorial_types', 'operation'}}\n"

    def test_typedef(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["describe", str(fixtures_dir / "tutorial.json"), "MyInteger"])
        assert result.exit_code == 0, result.output
        assert result.output == "i32\n"

    def test_unknown_type(self, fixtures_dir: Path) -> None:
        result = runner.invoke(app, ["describe", str(fixtures_dir / "tutorial.json"), "Nope"])
        assert result.exit_code == 1
        assert "Error: program 'tutorial' has no type 'Nope'" in result.output
