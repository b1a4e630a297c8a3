"""Tests for cli module."""

import json
from pathlib import Path

from click.testing import CliRunner

from cards_to_anki.cli import cli
from cards_to_anki.exporter import summarize_package

REQUEST = {
    "decks": [{"id": 1, "name": "Deck A"}],
    "cards": [
        {"deckId": 1, "front": "2+2", "back": "4"},
        {"deckId": 1, "noteType": "cloze", "text": "The sky is {{c1::blue}}."},
    ],
}


def write_request(path: Path, request: dict = REQUEST) -> Path:
    path.write_text(json.dumps(request))
    return path


class TestCLIGroup:
    """Tests for the top-level CLI group."""

    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "build" in result.output
        assert "inspect" in result.output

    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestBuildCommand:
    """Tests for the build command."""

    def test_build_default_output(self, tmp_path):
        source = write_request(tmp_path / "cards.json")
        result = CliRunner().invoke(cli, ["build", str(source)])

        assert result.exit_code == 0, result.output
        output = tmp_path / "cards.apkg"
        assert output.exists()
        assert summarize_package(output.read_bytes()).note_count == 2

    def test_build_with_css(self, tmp_path):
        source = write_request(tmp_path / "cards.json")
        css = tmp_path / "style.css"
        css.write_text(".card { color: red; }")
        output = tmp_path / "out" / "deck.apkg"

        result = CliRunner().invoke(
            cli, ["build", str(source), "-o", str(output), "--css", str(css)]
        )
        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_build_unsupported_note_type(self, tmp_path):
        request = {
            "decks": [{"id": 1, "name": "Deck A"}],
            "cards": [{"deckId": 1, "noteType": "unsupported"}],
        }
        source = write_request(tmp_path / "bad.json", request)
        result = CliRunner().invoke(cli, ["build", str(source)])

        assert result.exit_code == 1
        assert "Export failed" in result.output
        assert not (tmp_path / "bad.apkg").exists()

    def test_build_invalid_json(self, tmp_path):
        source = tmp_path / "broken.json"
        source.write_text("{not json")
        result = CliRunner().invoke(cli, ["build", str(source)])

        assert result.exit_code == 1
        assert "Invalid input" in result.output


class TestInspectCommand:
    """Tests for the inspect command."""

    def test_inspect(self, tmp_path):
        source = write_request(tmp_path / "cards.json")
        runner = CliRunner()
        runner.invoke(cli, ["build", str(source)])

        result = runner.invoke(cli, ["inspect", str(tmp_path / "cards.apkg")])
        assert result.exit_code == 0, result.output
        assert "Notes" in result.output
        assert "Deck A" in result.output

    def test_inspect_not_a_package(self, tmp_path):
        path = tmp_path / "fake.apkg"
        path.write_bytes(b"nope")
        result = CliRunner().invoke(cli, ["inspect", str(path)])

        assert result.exit_code == 1
        assert "Cannot read package" in result.output
