from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from invoice_export.config import ExportSettings
from invoice_export.domain.models import EnrichedProduct, ExtractedItem, Specification
from invoice_export.export.dialects import UnknownDialectError
from invoice_export.export.emit import DirectoryDownloadHost
from invoice_export.export.service import ExportService


class _FakeClipboard:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls = []

    async def __call__(self, text: str) -> None:
        self.calls.append(text)
        if self.error is not None:
            raise self.error


class _BrokenHost:
    def save(self, blob, file_name, mime_type):
        raise OSError("no space left on device")


@pytest.fixture
def items():
    return [ExtractedItem("A1", "Widget", 2, 9.5)]


def _service(tmp_path: Path, clipboard=None) -> ExportService:
    return ExportService(
        host=DirectoryDownloadHost(tmp_path),
        clipboard=clipboard,
        settings=ExportSettings(export_dir=str(tmp_path)),
    )


def test_export_file_writes_dialect_file(tmp_path: Path, items):
    outcome = _service(tmp_path).export_file(items, "invoice-items-csv")
    assert outcome.ok
    assert outcome.title == "CSV Exported"
    assert outcome.path == tmp_path / "extracted_invoice_data.csv"
    assert outcome.path.read_text(encoding="utf-8") == "Product Code,Product Name,Quantity,Unit Price\nA1,Widget,2,9.5"


def test_export_with_no_records_writes_nothing(tmp_path: Path):
    outcome = _service(tmp_path).export_file([], "invoice-items-csv")
    assert outcome.status == "empty"
    assert outcome.title == "No data"
    assert outcome.path is None
    assert list(tmp_path.iterdir()) == []


def test_export_file_host_failure_is_reported(tmp_path: Path, items):
    service = ExportService(host=_BrokenHost(), settings=ExportSettings(export_dir=str(tmp_path)))
    outcome = service.export_file(items, "artikel-csv")
    assert outcome.status == "failed"
    assert "artikel_export.csv" in outcome.description


def test_export_json(tmp_path: Path):
    product = EnrichedProduct("bohrmaschine", "Pro Drill", "Drill", "img", [Specification("Power", "500W")])
    outcome = _service(tmp_path).export_json([product], "products")
    assert outcome.ok
    assert outcome.title == "JSON Exported"
    assert outcome.path.name == "produktkatalog.json"
    data = json.loads(outcome.path.read_text(encoding="utf-8"))
    assert data[0]["specifications"] == [{"key": "Power", "value": "500W"}]


def test_copy_uses_dialect_text(tmp_path: Path, items):
    clipboard = _FakeClipboard()
    outcome = asyncio.run(_service(tmp_path, clipboard).copy(items, "invoice-items-tsv"))
    assert outcome.ok
    assert clipboard.calls == ["Product Code\tProduct Name\tQuantity\tUnit Price\nA1\tWidget\t2\t9.5"]


def test_copy_empty_never_touches_clipboard(tmp_path: Path):
    clipboard = _FakeClipboard()
    outcome = asyncio.run(_service(tmp_path, clipboard).copy([], "invoice-items-tsv"))
    assert outcome.status == "empty"
    assert outcome.description == "There is no data to copy."
    assert clipboard.calls == []


def test_copy_failure_is_reported(tmp_path: Path, items):
    clipboard = _FakeClipboard(error=PermissionError("denied"))
    outcome = asyncio.run(_service(tmp_path, clipboard).copy(items, "invoice-items-tsv"))
    assert outcome.status == "failed"
    assert outcome.title == "Copy failed"


def test_unknown_dialect(tmp_path: Path, items):
    with pytest.raises(UnknownDialectError):
        _service(tmp_path).export_file(items, "xlsx")
