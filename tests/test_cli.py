"""Tests for the command line entry point."""

import json

import pytest

from injaz import cli


def test_import_requires_user():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["import-csv", "data.csv"])


def test_serve_defaults():
    args = cli.build_parser().parse_args(["serve"])

    assert args.host is None
    assert args.port is None
    assert args.handler is cli._serve


def test_failing_command_returns_1(monkeypatch):
    def boom(args):
        raise RuntimeError("no database")

    monkeypatch.setattr(cli, "_init_db", boom)

    assert cli.main(["init-db"]) == 1


def test_import_csv_prints_stats(monkeypatch, tmp_path, capsys, session_factory, org, user):
    import contextlib

    @contextlib.contextmanager
    def scope():
        db = session_factory()
        try:
            yield db
            db.commit()
        finally:
            db.close()

    monkeypatch.setattr("injaz.db.session.init_db", lambda: None)
    monkeypatch.setattr("injaz.db.session.session_scope", scope)
    csv_file = tmp_path / "tx.csv"
    csv_file.write_text(
        "Date,Description,Amount,Type,Category,Party,Project,Status\n"
        "2024-02-01,Retainer,900,income,,Acme Holdings,,completed\n",
        encoding="utf-8",
    )

    assert cli.main(["import-csv", str(csv_file), "--user", "user-1"]) == 0

    out = capsys.readouterr().out
    stats = json.loads(out[out.index("{\n") :])
    assert stats["payments"] == {"created": 1, "skipped": 0}
