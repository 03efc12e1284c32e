from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Optional

from ..config import ExportSettings, load_settings
from ..logging import get_logger
from .dialects import JSON_MIME, get_dialect, get_record_kind
from .emit import (
    ClipboardError,
    ClipboardWriter,
    CommandClipboard,
    DirectoryDownloadHost,
    DownloadError,
    DownloadHost,
    copy_to_clipboard,
    download,
)
from .serialize import render, to_json


LOG = get_logger("export-service")

STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"


@dataclass
class ExportOutcome:
    status: str
    title: str
    description: str
    path: Optional[Path] = None
    content: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


def _format_label(mime_type: str) -> str:
    if mime_type.startswith("application/json"):
        return "JSON"
    if mime_type.startswith("text/tab-separated-values"):
        return "TSV"
    return "CSV"


class ExportService:
    """Runs one user-triggered export or copy and reports it as an outcome.

    Empty input and host failures become outcomes with a notice title and
    description instead of exceptions.
    """

    def __init__(
        self,
        *,
        host: Optional[DownloadHost] = None,
        clipboard: Optional[ClipboardWriter] = None,
        settings: Optional[ExportSettings] = None,
    ) -> None:
        self._settings = settings
        self._host = host
        self._clipboard = clipboard

    @property
    def settings(self) -> ExportSettings:
        if self._settings is None:
            self._settings = load_settings()
        return self._settings

    @property
    def host(self) -> DownloadHost:
        if self._host is None:
            self._host = DirectoryDownloadHost(self.settings.export_dir)
        return self._host

    @property
    def clipboard(self) -> ClipboardWriter:
        if self._clipboard is None:
            self._clipboard = CommandClipboard(self.settings.clipboard_command)
        return self._clipboard

    def _save(self, content: str, file_name: str, mime_type: str, count: int) -> ExportOutcome:
        label = _format_label(mime_type)
        try:
            path = download(content, file_name, mime_type, host=self.host)
        except DownloadError as exc:
            LOG.error(f"Export of {file_name} failed: {exc}")
            return ExportOutcome(STATUS_FAILED, "Export failed", f"Could not save {file_name}.")
        LOG.info(f"Exported {count} record(s) to {path}")
        return ExportOutcome(
            STATUS_OK,
            f"{label} Exported",
            f"{count} record(s) exported to {label}.",
            path=path,
            content=content,
        )

    def export_file(self, records: Iterable[Any], dialect_name: str) -> ExportOutcome:
        dialect = get_dialect(dialect_name)
        snapshot = list(records)
        if not snapshot:
            LOG.info(f"Nothing to export for {dialect.name}")
            return ExportOutcome(STATUS_EMPTY, "No data", "There is no data to export.")
        content = render(snapshot, dialect)
        return self._save(content, dialect.file_name, dialect.mime_type, len(snapshot))

    def export_json(self, records: Iterable[Any], kind_name: str) -> ExportOutcome:
        kind = get_record_kind(kind_name)
        snapshot = list(records)
        if not snapshot:
            LOG.info(f"Nothing to export for {kind.name} JSON")
            return ExportOutcome(STATUS_EMPTY, "No data", "There is no data to export.")
        return self._save(to_json(snapshot, kind), kind.json_file_name, JSON_MIME, len(snapshot))

    async def copy(self, records: Iterable[Any], dialect_name: str) -> ExportOutcome:
        dialect = get_dialect(dialect_name)
        snapshot = list(records)
        if not snapshot:
            LOG.info(f"Nothing to copy for {dialect.name}")
            return ExportOutcome(STATUS_EMPTY, "No data", "There is no data to copy.")
        content = render(snapshot, dialect)
        try:
            await copy_to_clipboard(content, clipboard=self.clipboard)
        except ClipboardError as exc:
            LOG.error(f"Failed to copy: {exc}")
            return ExportOutcome(STATUS_FAILED, "Copy failed", "Could not copy data to clipboard.")
        LOG.info(f"Copied {len(snapshot)} record(s) as {dialect.name}")
        return ExportOutcome(
            STATUS_OK,
            "Copied to clipboard!",
            f"{len(snapshot)} record(s) copied successfully.",
            content=content,
        )
