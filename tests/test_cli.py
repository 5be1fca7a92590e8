"""Tests for the notestoself CLI."""

import json
import logging

import pytest

from notestoself.cli.__main__ import build_parser, main

NOTE_ID = "6f1c2e0a-3b4d-4c5e-8f90-a1b2c3d4e5f6"
PERSON_ID = "0d9e8f7a-6b5c-4d3e-9f2a-1b0c9d8e7f6a"


@pytest.fixture(autouse=True)
def clean_notestoself_logger():
    """main() attaches a file handler; drop it after each test."""
    yield
    logger = logging.getLogger("notestoself")
    for h in logger.handlers:
        h.close()
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def cli(capsys):
    """Run the CLI offline and return captured stdout."""

    def run(*argv):
        main(["--offline", *argv])
        return capsys.readouterr().out

    return run


def list_json(cli, kind):
    return json.loads(cli("list", kind, "--json"))


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_rejects_unknown_kind(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["add", "diary", "text"])

    def test_widget_defaults_to_show(self):
        args = build_parser().parse_args(["widget"])
        assert args.widget_action == "show"


class TestRecordCommands:
    def test_add_and_list(self, cli):
        out = cli("add", "note", "Drink water")
        assert out.startswith("✓ Added note")
        notes = list_json(cli, "note")
        assert [n["text"] for n in notes] == ["Drink water"]

    def test_list_empty(self, cli):
        assert "No reminders yet." in cli("list", "reminder")

    def test_newest_first(self, cli):
        cli("add", "person", "Sam")
        cli("add", "person", "Alex")
        assert [p["text"] for p in list_json(cli, "person")] == ["Alex", "Sam"]

    def test_add_cbt_with_distortion(self, cli):
        cli(
            "add",
            "cbt",
            "Missed the train",
            "-d",
            "00000000-0000-0000-0000-000000000001",
            "--challenge",
            "One train",
        )
        (entry,) = list_json(cli, "cbt")
        assert entry["situation"] == "Missed the train"
        assert entry["challenge"] == "One train"
        assert entry["distortionIds"] == ["00000000-0000-0000-0000-000000000001"]
        assert "All-or-Nothing Thinking" in cli("list", "cbt")

    def test_unknown_distortion_exits(self, cli, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--offline", "add", "cbt", "x", "-d", "00000000-0000-0000-0000-0000000000ff"])
        assert exc.value.code == 1
        assert "Unknown distortion id" in capsys.readouterr().err

    def test_edit_by_prefix(self, cli):
        cli("add", "note", "draft")
        note_id = list_json(cli, "note")[0]["id"]
        assert "✓ Updated" in cli("edit", "note", note_id[:8], "final")
        (note,) = list_json(cli, "note")
        assert note["text"] == "final"
        assert note["id"] == note_id

    def test_delete(self, cli):
        cli("add", "reminder", "Call mum")
        reminder_id = list_json(cli, "reminder")[0]["id"]
        assert "✓ Deleted reminder" in cli("delete", "reminder", reminder_id)
        assert list_json(cli, "reminder") == []

    def test_missing_id_exits(self, cli, capsys):
        with pytest.raises(SystemExit) as exc:
            main(["--offline", "delete", "note", "deadbeef"])
        assert exc.value.code == 1
        assert "No unique notes record" in capsys.readouterr().err

    def test_todo_toggle(self, cli):
        cli("add", "todo", "Ship it")
        todo_id = list_json(cli, "todo")[0]["id"]
        assert "marked done" in cli("todo", "toggle", todo_id)
        assert list_json(cli, "todo")[0]["isCompleted"] is True
        assert "marked open" in cli("todo", "toggle", todo_id)

    def test_search(self, cli):
        cli("add", "note", "Lunch with Alex")
        cli("add", "person", "Alex likes tea")
        out = cli("search", "alex")
        assert "Found 2 result(s)" in out
        assert "[person] Alex likes tea" in out
        assert "No entries or people match 'zzz'" in cli("search", "zzz")


class TestTransferCommands:
    def test_export_stdout(self, cli):
        cli("add", "note", "exported")
        snapshot = json.loads(cli("export"))
        assert snapshot["notes"][0]["text"] == "exported"
        assert "exportDate" in snapshot

    def test_export_to_file_then_import(self, cli, tmp_path):
        cli("add", "note", "keep me")
        cli("add", "todo", "and me")
        path = tmp_path / "backup.json"
        cli("export", "--output", str(path))
        cli("delete-all", "--yes")
        assert list_json(cli, "note") == []

        out = cli("import", str(path), "--yes")
        assert out.startswith("Import complete:")
        assert [n["text"] for n in list_json(cli, "note")] == ["keep me"]
        assert [t["text"] for t in list_json(cli, "todo")] == ["and me"]

    def test_import_notes_only(self, cli, tmp_path):
        path = tmp_path / "notes.json"
        path.write_text(
            json.dumps([{"id": NOTE_ID, "date": "2025-11-01T09:00:00Z", "text": "imported"}])
        )
        out = cli("import", str(path), "--notes-only")
        assert "✓ Imported notes: 1 added" in out
        assert list_json(cli, "note")[0]["text"] == "imported"

    def test_import_declined(self, cli, tmp_path, monkeypatch):
        path = tmp_path / "backup.json"
        path.write_text(
            json.dumps(
                {
                    "exportDate": "2025-11-02T10:30:00Z",
                    "people": [{"id": PERSON_ID, "date": "2025-11-01T09:00:00Z", "text": "Sam"}],
                }
            )
        )
        monkeypatch.setattr("builtins.input", lambda prompt="": "n")
        out = cli("import", str(path))
        assert "This will merge the following" in out
        assert "Import cancelled" in out
        assert list_json(cli, "person") == []

    def test_import_invalid_file(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("{nope")
        with pytest.raises(SystemExit) as exc:
            main(["--offline", "import", str(path), "--yes"])
        assert exc.value.code == 1
        assert "✗ Import failed: Invalid JSON" in capsys.readouterr().err

    def test_import_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit):
            main(["--offline", "import", str(tmp_path / "missing.json")])
        assert "File not found" in capsys.readouterr().err

    def test_delete_all_declined(self, cli, monkeypatch):
        cli("add", "note", "survivor")
        monkeypatch.setattr("builtins.input", lambda prompt="": "")
        out = cli("delete-all")
        assert "Cancelled. Nothing was deleted." in out
        assert len(list_json(cli, "note")) == 1

    def test_delete_all_confirmed(self, cli, monkeypatch):
        cli("add", "note", "a")
        cli("add", "person", "b")
        monkeypatch.setattr("builtins.input", lambda prompt="": "yes")
        assert "✓ Deleted 2 items" in cli("delete-all")


class TestStatusAndWidget:
    def test_status_json(self, cli):
        cli("add", "todo", "open one")
        stats = json.loads(cli("status", "--json"))
        assert stats["counts"]["todos"] == 1
        assert stats["open_todos"] == 1
        assert stats["online"] is False
        assert stats["states"]["todos"] == "synced_local"

    def test_status_text(self, cli):
        out = cli("status")
        assert "unavailable (local only)" in out

    def test_widget_placeholder(self, cli):
        assert cli("widget").strip() == "No notes"

    def test_widget_next_wraps(self, cli):
        cli("add", "note", "one")
        cli("add", "note", "two")
        assert cli("widget", "show").strip() == "[1/2] two"
        assert cli("widget", "next").strip() == "[2/2] one"
        assert cli("widget", "next").strip() == "[1/2] two"
