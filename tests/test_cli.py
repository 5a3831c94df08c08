"""Smoke tests for the command-line host."""
import pytest

from opening_drills import cli
from opening_drills.lib.data.repository import JsonRepertoireRepository

PGN = """[Event "Caro-Kann"]

1. e4 c6 2. d4 d5 {Solid} *
"""


@pytest.fixture
def store(tmp_path, monkeypatch):
    path = tmp_path / "repertoires.json"
    monkeypatch.setattr(cli, "setup_logging", lambda: None)
    monkeypatch.setenv("REPERTOIRE_STORE", str(path))
    monkeypatch.setenv("AUTO_PLAY_DELAY_MS", "0")
    return JsonRepertoireRepository(str(path))


@pytest.fixture
def pgn_file(tmp_path):
    path = tmp_path / "caro_kann.pgn"
    path.write_text(PGN, encoding="utf-8")
    return str(path)


def test_import_and_list(store, pgn_file, capsys):
    assert cli.main(["import", pgn_file]) == 0
    assert cli.main(["list"]) == 0

    out = capsys.readouterr().out
    assert "caro_kann" in out
    assert "lines=1 due=1" in out


def test_import_missing_file(store, tmp_path):
    assert cli.main(["import", str(tmp_path / "nope.pgn")]) == 1


def test_drill_as_black(store, pgn_file, monkeypatch, capsys):
    cli.main(["import", pgn_file])
    repertoire = store.list_all()[0]
    answers = iter(["hint", "e5", "hint", "c6", "d5"])
    monkeypatch.setattr("builtins.input", lambda _prompt: next(answers))

    assert cli.main(["drill", repertoire.id, "--side", "black"]) == 0

    out = capsys.readouterr().out
    assert "No hint yet" in out
    assert "Move the piece on c7." in out
    assert "Line complete: incorrect." in out
    stored = store.get_by_id(repertoire.id)
    assert stored.lines[0].mistake_move_indices == frozenset({1})
    assert stored.total_reviews == 3


def test_drill_quit(store, pgn_file, monkeypatch, capsys):
    cli.main(["import", pgn_file])
    repertoire = store.list_all()[0]
    monkeypatch.setattr("builtins.input", lambda _prompt: "quit")

    assert cli.main(["drill", repertoire.id]) == 0
    assert "Session saved without rescheduling." in capsys.readouterr().out


def test_delete(store, pgn_file):
    cli.main(["import", pgn_file])
    repertoire_id = store.list_all()[0].id

    assert cli.main(["delete", repertoire_id]) == 0
    assert cli.main(["delete", repertoire_id]) == 1


def test_unknown_repertoire(store):
    assert cli.main(["due", "missing"]) == 1
