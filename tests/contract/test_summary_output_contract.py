from __future__ import annotations

import re
from pathlib import Path

from sheetsync.cli import main as cli_main

"""SUMMARY line contract: exactly one line, fixed key order, last line of output."""

SUMMARY_RE = re.compile(
    r"^SUMMARY appended=(\d+) updated=(\d+) unchanged=(\d+) cells=(\d+) "
    r"skipped_rows=(\d+) diagnostics=(\d+) elapsed_sec=(\d+(?:\.\d+)?) mode=(live|dry-run)$"
)


def _summary_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.startswith("SUMMARY")]


def test_summary_line_format_live(write_config: Path, people_workbook: Path, people_csv: Path, capsys):
    assert cli_main([]) == 0
    out = capsys.readouterr().out
    lines = _summary_lines(out)
    assert len(lines) == 1
    assert out.rstrip("\n").splitlines()[-1] == lines[0]
    m = SUMMARY_RE.match(lines[0])
    assert m is not None
    assert m.group(1, 2, 3, 4, 5, 6) == ("1", "1", "0", "4", "0", "0")
    assert m.group(8) == "live"


def test_summary_line_format_dry_run(write_config: Path, people_workbook: Path, people_csv: Path, capsys):
    assert cli_main(["--dry-run"]) == 0
    lines = _summary_lines(capsys.readouterr().out)
    assert len(lines) == 1
    m = SUMMARY_RE.match(lines[0])
    assert m is not None
    assert m.group(8) == "dry-run"


def test_summary_counts_skipped_rows_and_diagnostics(
    write_config: Path, people_workbook: Path, temp_workdir: Path, capsys
):
    (temp_workdir / "data" / "snapshot.csv").write_text(
        "ID,Name,Active,Extra\n,Ghost,YES,x\n1,Alice,NO,y\n", encoding="utf-8"
    )
    assert cli_main([]) == 0
    m = SUMMARY_RE.match(_summary_lines(capsys.readouterr().out)[0])
    assert m is not None
    # skipped row + unmapped column
    assert m.group(5) == "1"
    assert m.group(6) == "2"
    assert m.group(3) == "1"
