from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, List, Optional, Sequence

from ..config import load_settings
from ..domain.parser import RecordValidationError
from ..export.dialects import DIALECTS, RECORD_KINDS, RecordKind, get_dialect, get_record_kind
from ..export.emit import DirectoryDownloadHost
from ..export.service import STATUS_EMPTY, ExportOutcome, ExportService
from ..logging import get_logger, set_level
from ..paths import expand_abs

LOG = get_logger("cli-main")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_EMPTY = 2


def _load_records(path: str, kind: RecordKind) -> Optional[List[Any]]:
    try:
        if path == "-":
            payload = json.load(sys.stdin)
        else:
            with open(expand_abs(path), "r", encoding="utf-8") as f:
                payload = json.load(f)
    except (OSError, ValueError) as exc:
        LOG.error(f"Could not read {path}: {exc}")
        return None
    try:
        return kind.parse(payload)
    except RecordValidationError as exc:
        LOG.error(f"Invalid {kind.name} input: {exc}")
        return None


def _report(outcome: ExportOutcome) -> int:
    if outcome.ok:
        LOG.info(f"{outcome.title} {outcome.description}")
        if outcome.path is not None:
            print(outcome.path)
        return EXIT_OK
    if outcome.status == STATUS_EMPTY:
        LOG.info(f"{outcome.title}: {outcome.description}")
        return EXIT_EMPTY
    LOG.error(f"{outcome.title}: {outcome.description}")
    return EXIT_FAILED


def _service(output_dir: Optional[str]) -> ExportService:
    settings = load_settings()
    if output_dir:
        settings.export_dir = expand_abs(output_dir)
    return ExportService(host=DirectoryDownloadHost(settings.export_dir), settings=settings)


def _handle_export(ns: argparse.Namespace) -> int:
    service = _service(ns.output_dir)
    if ns.json:
        kind = get_record_kind(ns.json)
        records = _load_records(ns.input, kind)
        if records is None:
            return EXIT_FAILED
        return _report(service.export_json(records, kind.name))
    dialect = get_dialect(ns.dialect)
    records = _load_records(ns.input, get_record_kind(dialect.kind))
    if records is None:
        return EXIT_FAILED
    return _report(service.export_file(records, dialect.name))


def _handle_copy(ns: argparse.Namespace) -> int:
    dialect = get_dialect(ns.dialect)
    records = _load_records(ns.input, get_record_kind(dialect.kind))
    if records is None:
        return EXIT_FAILED
    return _report(asyncio.run(ExportService().copy(records, dialect.name)))


def _handle_dialects(_: argparse.Namespace) -> int:
    for d in DIALECTS.values():
        print(f"{d.name:<32} {d.kind:<22} {d.file_name}")
    return EXIT_OK


def _handle_serve(ns: argparse.Namespace) -> int:
    from ..frontend import create_app
    import uvicorn

    set_level(ns.log_level)
    allow_origins = ns.allow_origins
    if allow_origins and "*" in allow_origins:
        allow_origins = ["*"]
    app = create_app(allow_origins=allow_origins)
    uvicorn.run(app, host=ns.host, port=ns.port, log_level=ns.log_level)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="invoice-export",
        description="Export extracted invoice, product and bank records as CSV/TSV/JSON.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    export = subparsers.add_parser("export", help="Write records to a file in the export directory.")
    target = export.add_mutually_exclusive_group(required=True)
    target.add_argument("--dialect", choices=sorted(DIALECTS), help="Delimited-text dialect to write")
    target.add_argument("--json", choices=sorted(RECORD_KINDS), help="Write records of this kind as JSON")
    export.add_argument("--input", required=True, help="JSON array of records ('-' for stdin)")
    export.add_argument("--output-dir", help="Override EXPORT_DIR for this run")
    export.set_defaults(handler=_handle_export)

    copy = subparsers.add_parser("copy", help="Copy records to the clipboard.")
    copy.add_argument("--dialect", required=True, choices=sorted(DIALECTS))
    copy.add_argument("--input", required=True, help="JSON array of records ('-' for stdin)")
    copy.set_defaults(handler=_handle_copy)

    dialects = subparsers.add_parser("dialects", help="List available dialects.")
    dialects.set_defaults(handler=_handle_dialects)

    serve = subparsers.add_parser("serve", help="Run the HTTP download API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8002)
    serve.add_argument("--log-level", default="info")
    serve.add_argument(
        "--allow-origin",
        action="append",
        dest="allow_origins",
        help="Allowed CORS origin (can be provided multiple times, use '*' for any).",
    )
    serve.set_defaults(handler=_handle_serve)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    provided = list(argv) if argv is not None else sys.argv[1:]
    LOG.debug(f"CLI invoked with arguments: {provided}")
    args = build_parser().parse_args(provided)
    code = args.handler(args)
    LOG.info(f"Subcommand '{args.command}' finished with exit code {code}.")
    return code


if __name__ == "__main__":
    sys.exit(main())
