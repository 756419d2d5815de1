from __future__ import annotations

import argparse
import sys
import zipfile
from pathlib import Path

from dotenv import load_dotenv

from sheetsync.config.loader import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    SyncConfig,
    apply_overrides,
    env_overrides,
    load_config,
)
from sheetsync.logging.init import enable_debug, log_summary, setup_logging
from sheetsync.services.applier import PatchApplyError
from sheetsync.services.orchestrator import SyncError, run_sync
from sheetsync.services.summary import render_plan, render_summary_line

"""CLI entrypoint.

Flow:
- load .env (override mode), then config/sync.yml
- layer SHEETSYNC_* environment variables, then CLI flags
- run one sync (or a dry run / sheet inspection)
- print one SUMMARY line and map the outcome to an exit code
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_APPLY = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存の環境変数を上書きする。
    失敗時は警告のみで続行。
    """
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except (OSError, UnicodeDecodeError) as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="sheetsync",
        description="Sync an .xlsx worksheet with a CSV snapshot keyed by one column",
    )
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config path")
    p.add_argument("--csv", dest="csv_path", help="CSV snapshot (overrides config)")
    p.add_argument("--workbook", dest="workbook_path", help="Workbook to patch (overrides config)")
    p.add_argument("--key-column", help="Join key column name (overrides config)")
    p.add_argument("--sheet", dest="sheet_name", help="Worksheet name (default: active sheet)")
    p.add_argument("--strict-dates", action="store_true", help="Fail on impossible date values")
    p.add_argument("--dry-run", action="store_true", help="Print planned writes, do not modify the workbook")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet header & first rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _inspect_data(cfg: SyncConfig) -> int:
    from sheetsync.excel.reader import list_sheet_names, read_sheet_grid

    path = Path(cfg.workbook_path)
    if not path.exists():
        print(f"inspect: workbook not found: {path}")
        return EXIT_FATAL
    try:
        names = list_sheet_names(path)
        print(f"WORKBOOK: {path.name} sheets={names}")
        targets = [cfg.sheet_name] if cfg.sheet_name else names
        for sname in targets:
            if sname not in names:
                print(f"  SHEET: {sname} error=not found")
                continue
            grid = read_sheet_grid(path, sname)
            header = grid[0] if grid else []
            print(f"  SHEET: {sname} cols={header} key_present={cfg.key_column in header}")
            print("    sample_rows=", grid[1:4])
    except (ValueError, KeyError, zipfile.BadZipFile, OSError) as e:
        print(f"inspect: cannot read workbook {path}: {e}")
        return EXIT_FATAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 空リスト [] はそのまま使う (None の時のみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    try:
        cfg = load_config(Path(args.config))
        cfg = apply_overrides(cfg, **env_overrides())
        cfg = apply_overrides(
            cfg,
            csv_path=args.csv_path,
            workbook_path=args.workbook_path,
            key_column=args.key_column,
            sheet_name=args.sheet_name,
            strict_dates=True if args.strict_dates else None,
        )
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        enable_debug(logger)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    try:
        result = run_sync(cfg, dry_run=args.dry_run)
    except SyncError as e:
        logger.error(f"sync: {e}")
        return EXIT_FATAL
    except PatchApplyError as e:
        logger.error(f"apply: {e}")
        logger.warning(f"{e.applied_writes} write(s) were applied before the failure (no rollback)")
        return EXIT_PARTIAL_APPLY

    if args.dry_run:
        print(render_plan(result.partition, result.columns))

    log_summary(render_summary_line(result).removeprefix("SUMMARY "))
    return EXIT_SUCCESS
