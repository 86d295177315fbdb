from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

from dotenv import load_dotenv

from ..api.client import ApiError, BulkImportClient
from ..config.loader import ConfigError, ImportConfig, load_config
from ..excel.reader import WorkbookParseError, read_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..services.bulk_import import convert_file, orders_without_id, submit_orders, write_output
from ..services.normalizer import ConversionError
from ..services.summary import render_conversion_line, render_import_line

"""CLI entrypoint.

Flow:
- Load .env (overrides process env) and config/import.yml
- Convert the selected sheet of FILE (nested by default) and write JSON
- Optionally (--send) submit the nested payload to the bulk-import endpoint

Exit codes: 0 success / 1 fatal / 2 the endpoint reported failed orders.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2

DEFAULT_CONFIG_PATH = Path("config/import.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv (values override the existing environment)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="order-import",
        description="Excel order export -> bulk-import JSON converter",
    )
    p.add_argument("file", type=Path, help="Excel file (.xlsx / .xls)")
    p.add_argument("--sheet", default=None, help="Sheet index or name (default: config 'sheet')")
    p.add_argument("--flat", action="store_true", help="Flat structure (one object per row) instead of nested orders")
    p.add_argument("--output", type=Path, default=None, help="Output JSON path (default: <output_directory>/<file stem>.json)")
    p.add_argument("--list-sheets", action="store_true", help="Print sheet names with their index and exit")
    p.add_argument("--send", action="store_true", help="Send the nested payload to the bulk-import API")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _list_sheets(path: Path) -> int:
    logger = setup_logging()
    try:
        workbook = read_workbook(path)
    except WorkbookParseError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    for index, name in enumerate(workbook.sheet_names):
        print(f"{index}: {name}")
    return EXIT_SUCCESS


def _send(cfg: ImportConfig, payload: dict, source: str) -> int:
    logger = setup_logging()
    missing = orders_without_id(payload)
    if missing:
        # 先頭の order_id 無し行から作られた注文は送信しない
        logger.error(f"send: {missing} order(s) without order_id (rows before the first order id); fix the sheet before sending")
        return EXIT_FATAL
    api = cfg.api.resolved()
    error_log = ErrorLogBuffer()
    start = datetime.now(UTC)
    try:
        with BulkImportClient(api.base_url, token=api.token, timeout=api.timeout) as client:
            response = submit_orders(client, payload, error_log, source=source)
    except ApiError as e:
        logger.error(f"api: {e}")
        return EXIT_FATAL
    elapsed = (datetime.now(UTC) - start).total_seconds()

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"rejected orders written to {log_path}")

    summary = response.summary
    if summary is None:
        # summary 無しのレスポンス (旧 API 互換)
        logger.info(f"Sent to API, response: {response.raw}")
        return EXIT_SUCCESS

    log_summary(render_import_line(summary, elapsed))
    if summary.failed > 0:
        logger.warning(f"{summary.failed} orders failed to process")
    if summary.skipped > 0:
        logger.info(f"{summary.skipped} orders were skipped (they may already exist)")
    return EXIT_PARTIAL_FAILURE if summary.failed > 0 else EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストから main([...]) で呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.list_sheets:
        return _list_sheets(args.file)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    nested = cfg.nested and not args.flat
    if args.send and not nested:
        logger.error("send: the bulk-import API accepts the nested structure only (drop --flat)")
        return EXIT_FATAL

    sheet = args.sheet if args.sheet is not None else cfg.sheet
    try:
        result = convert_file(args.file, sheet=sheet, nested=nested)
    except WorkbookParseError as e:
        logger.error(f"read: {e}")
        return EXIT_FATAL
    except ConversionError as e:
        logger.error(f"convert: {e}")
        return EXIT_FATAL

    output = args.output or Path(cfg.output_directory) / f"{args.file.stem}.json"
    write_output(result, output)
    logger.info(f"Output written to {output}")
    log_summary(render_conversion_line(result))

    if args.send:
        return _send(cfg, result.payload, source=result.source)
    return EXIT_SUCCESS
