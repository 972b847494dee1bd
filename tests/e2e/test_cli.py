# ABOUTME: End-to-end tests for the md2epub CLI.
# ABOUTME: Tests the build and inspect commands via Click's CliRunner on real directories.

import json
import zipfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from md2epub.cli import cli


def write_json(path: Path, data: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


class TestCliHelp:
    def test_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "inspect" in result.output

    def test_short_help(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["build", "-h"])
        assert result.exit_code == 0
        assert "--author" in result.output
        assert "--tags" in result.output

    def test_version(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output

    def test_unknown_option(self, book_dir: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir), "--bogus"])
        assert result.exit_code == 2
        assert "No such option" in result.output
        assert not (book_dir / "book-My Book.epub").exists()


class TestCliBuild:
    """E2e tests for `md2epub build`."""

    def test_build_creates_epub_and_sidecar(self, book_dir: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir), "-a", "Jane Doe", "-T", "x", "-T", "y"])
        assert result.exit_code == 0, result.output
        assert "Built 3 chapter(s), 3 image(s)" in result.output
        assert "book-My Book.epub" in result.output

        epub_path = book_dir / "book-My Book.epub"
        assert zipfile.is_zipfile(epub_path)
        sidecar = json.loads((book_dir / "metadata.json").read_text(encoding="utf-8"))
        assert sidecar["title"] == "My Book"
        assert sidecar["author"] == "Jane Doe"
        assert sidecar["tags"] == ["x", "y"]
        assert sidecar["cover_image"] == "cover.jpg"

    def test_build_current_directory(
        self, book_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(book_dir)
        runner = CliRunner()
        result = runner.invoke(cli, ["build"])
        assert result.exit_code == 0, result.output
        assert (book_dir / "book-My Book.epub").is_file()

    def test_custom_output(self, book_dir: Path, tmp_path: Path) -> None:
        target = tmp_path / "custom.epub"
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir), "-o", str(target)])
        assert result.exit_code == 0, result.output
        assert target.is_file()

    def test_sidecar_kept_on_rebuild(self, book_dir: Path) -> None:
        runner = CliRunner()
        first = runner.invoke(cli, ["build", str(book_dir), "-a", "First"])
        assert first.exit_code == 0, first.output
        before = (book_dir / "metadata.json").read_bytes()

        second = runner.invoke(cli, ["build", str(book_dir), "-a", "Second", "-t", "Other"])
        assert second.exit_code == 0, second.output
        assert (book_dir / "metadata.json").read_bytes() == before
        assert (book_dir / "book-My Book.epub").is_file()
        assert not (book_dir / "book-Other.epub").exists()

    def test_malformed_sidecar_fails(self, book_dir: Path) -> None:
        (book_dir / "metadata.json").write_text("{broken", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir)])
        assert result.exit_code == 1
        assert "Error" in result.output
        assert not list(book_dir.glob("*.epub"))

    def test_name_collision_fails(self, book_dir: Path) -> None:
        (book_dir / "nav.md").write_text("# Nav\n", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir)])
        assert result.exit_code == 1
        assert "Duplicate archive entry" in result.output
        assert not list(book_dir.glob("*.epub"))

    def test_missing_directory(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(tmp_path / "nope")])
        assert result.exit_code == 2


class TestCliConfig:
    """Configuration files supply defaults for `build`."""

    def test_home_config_defaults(self, book_dir: Path, isolated_config: Path) -> None:
        write_json(
            isolated_config / ".md2epub.json",
            {"defaultAuthor": "Config Author", "defaultLanguage": "CN"},
        )
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir)])
        assert result.exit_code == 0, result.output
        sidecar = json.loads((book_dir / "metadata.json").read_text(encoding="utf-8"))
        assert sidecar["author"] == "Config Author"
        assert sidecar["language"] == "CN"

    def test_cli_beats_config(self, book_dir: Path, isolated_config: Path) -> None:
        write_json(isolated_config / ".md2epub.json", {"defaultAuthor": "Config Author"})
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir), "--author", "CLI Author"])
        assert result.exit_code == 0, result.output
        sidecar = json.loads((book_dir / "metadata.json").read_text(encoding="utf-8"))
        assert sidecar["author"] == "CLI Author"

    def test_config_option(self, book_dir: Path, isolated_config: Path, tmp_path: Path) -> None:
        write_json(isolated_config / ".md2epub.json", {"defaultAuthor": "Home"})
        extra = tmp_path / "extra.json"
        write_json(extra, {"defaultAuthor": "Extra", "defaultTags": ["t1"]})
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(extra), "build", str(book_dir)])
        assert result.exit_code == 0, result.output
        sidecar = json.loads((book_dir / "metadata.json").read_text(encoding="utf-8"))
        assert sidecar["author"] == "Extra"
        assert sidecar["tags"] == ["t1"]

    def test_malformed_config_does_not_abort(self, book_dir: Path, isolated_config: Path) -> None:
        (isolated_config / ".md2epub.json").write_text("{oops", encoding="utf-8")
        runner = CliRunner()
        result = runner.invoke(cli, ["build", str(book_dir)])
        assert result.exit_code == 0, result.output
        assert (book_dir / "book-My Book.epub").is_file()


class TestCliInspect:
    """E2e tests for `md2epub inspect`."""

    def test_inspect_built_book(self, book_dir: Path) -> None:
        runner = CliRunner()
        built = runner.invoke(cli, ["build", str(book_dir), "-a", "Jane Doe"])
        assert built.exit_code == 0, built.output

        result = runner.invoke(cli, ["inspect", str(book_dir / "book-My Book.epub")])
        assert result.exit_code == 0, result.output
        assert "My Book" in result.output
        assert "Jane Doe" in result.output
        assert "a - First Chapter" in result.output

    def test_inspect_nonexistent_file_fails(self, tmp_path: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(tmp_path / "nope.epub")])
        assert result.exit_code != 0

    def test_inspect_corrupt_epub_reports_error(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.epub"
        bad.write_bytes(b"not an epub")
        runner = CliRunner()
        result = runner.invoke(cli, ["inspect", str(bad)])
        assert result.exit_code == 1
        assert "Error" in result.output
