from __future__ import annotations

from pathlib import Path

from sheetsync.cli import main as cli_main


def test_cli_live_mode_writes_and_summarises(write_config: Path, people_workbook: Path, people_csv: Path, capsys):
    code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY appended=1 updated=1 unchanged=0 cells=4" in out
    assert "mode=live" in out


def test_cli_dry_run_prints_plan(write_config: Path, people_workbook: Path, people_csv: Path, capsys):
    before = people_workbook.read_bytes()
    code = cli_main(["--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "action" in out and "append" in out and "Bob" in out
    assert "mode=dry-run" in out
    assert people_workbook.read_bytes() == before


def test_cli_flags_override_config(write_config: Path, temp_workdir: Path, make_workbook, capsys):
    make_workbook(temp_workdir / "data" / "alt.xlsx", {"Codes": [["Code", "Label"], ["A", "old"]]})
    (temp_workdir / "data" / "alt.csv").write_text("Code,Label\nA,new\n", encoding="utf-8")

    code = cli_main([
        "--csv", "data/alt.csv",
        "--workbook", "data/alt.xlsx",
        "--key-column", "Code",
        "--sheet", "Codes",
    ])
    out = capsys.readouterr().out
    assert code == 0
    assert "updated=1" in out


def test_cli_env_overrides_config(write_config: Path, temp_workdir: Path, people_workbook: Path, monkeypatch, capsys):
    (temp_workdir / "data" / "env.csv").write_text("ID,Name\n7,Gus\n", encoding="utf-8")
    monkeypatch.setenv("SHEETSYNC_CSV_PATH", "data/env.csv")
    code = cli_main([])
    assert code == 0
    assert "appended=1 updated=0" in capsys.readouterr().out


def test_cli_dotenv_file_is_loaded(write_config: Path, temp_workdir: Path, people_workbook: Path, monkeypatch, capsys):
    (temp_workdir / "data" / "dot.csv").write_text("ID,Name\n8,Hal\n9,Ivy\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("SHEETSYNC_CSV_PATH=data/dot.csv\n", encoding="utf-8")
    # 空値は無視される。teardown で .env の値を消すために登録だけしておく
    monkeypatch.setenv("SHEETSYNC_CSV_PATH", "")
    code = cli_main([])
    assert code == 0
    assert "appended=2" in capsys.readouterr().out


def test_cli_debug_mode_emits_debug_lines(write_config: Path, people_workbook: Path, people_csv: Path, capsys):
    code = cli_main(["--debug", "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out


def test_cli_inspect_data(write_config: Path, people_workbook: Path, capsys):
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "WORKBOOK: sheet.xlsx" in out
    assert "SHEET: People" in out
    assert "key_present=True" in out


def test_cli_inspect_data_missing_workbook(write_config: Path, capsys):
    code = cli_main(["--inspect-data"])
    assert code == 1
    assert "workbook not found" in capsys.readouterr().out


def test_cli_inspect_data_unreadable_workbook(write_config: Path, temp_workdir: Path, capsys):
    (temp_workdir / "data" / "sheet.xlsx").write_bytes(b"not a zip")
    code = cli_main(["--inspect-data"])
    out = capsys.readouterr().out
    assert code == 1
    assert "inspect: cannot read workbook" in out
    assert "Traceback" not in out
