from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from invoice_export.export import emit
from invoice_export.export.emit import (
    ClipboardError,
    CommandClipboard,
    DirectoryDownloadHost,
    DownloadError,
    charset_of,
    copy_to_clipboard,
    download,
)


class _RecordingHost:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.blob = None
        self.data = b""

    def save(self, blob, file_name, mime_type):
        self.blob = blob
        self.data = blob.read()
        if self.fail:
            raise PermissionError("read-only volume")
        return Path("/virtual") / file_name


def test_charset_of():
    assert charset_of("text/csv;charset=utf-8;") == "utf-8"
    assert charset_of('text/csv; charset="latin-1"') == "latin-1"
    assert charset_of("application/octet-stream") == "utf-8"


def test_download_writes_file(tmp_path: Path):
    path = download("a,b\n1,2", "export.csv", "text/csv;charset=utf-8;", host=DirectoryDownloadHost(tmp_path))
    assert path == tmp_path / "export.csv"
    assert path.read_text(encoding="utf-8") == "a,b\n1,2"
    assert [p.name for p in tmp_path.iterdir()] == ["export.csv"]


def test_download_encodes_with_mime_charset():
    host = _RecordingHost()
    download("Maß", "x.csv", "text/csv;charset=latin-1", host=host)
    assert host.data == "Maß".encode("latin-1")


def test_download_releases_payload_on_failure():
    host = _RecordingHost(fail=True)
    with pytest.raises(DownloadError):
        download("a", "x.csv", "text/csv;charset=utf-8;", host=host)
    assert host.blob.closed


def test_download_releases_payload_on_success():
    host = _RecordingHost()
    download("a", "x.csv", "text/csv;charset=utf-8;", host=host)
    assert host.blob.closed


def test_directory_host_removes_staging_file(tmp_path: Path, monkeypatch):
    def _boom(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(emit.os, "replace", _boom)
    with pytest.raises(DownloadError):
        download("a", "x.csv", "text/csv;charset=utf-8;", host=DirectoryDownloadHost(tmp_path))
    assert list(tmp_path.iterdir()) == []


def test_directory_host_strips_directories_from_name(tmp_path: Path):
    path = download("a", "../escape.csv", "text/csv;charset=utf-8;", host=DirectoryDownloadHost(tmp_path))
    assert path == tmp_path / "escape.csv"


def test_copy_to_clipboard_success():
    seen = []

    async def clipboard(text: str) -> None:
        seen.append(text)

    asyncio.run(copy_to_clipboard("a\tb", clipboard=clipboard))
    assert seen == ["a\tb"]


def test_copy_to_clipboard_reports_rejection():
    async def clipboard(text: str) -> None:
        raise PermissionError("clipboard permission denied")

    with pytest.raises(ClipboardError) as exc:
        asyncio.run(copy_to_clipboard("a", clipboard=clipboard))
    assert isinstance(exc.value.__cause__, PermissionError)


def test_command_clipboard_pipes_text(tmp_path: Path):
    target = tmp_path / "clip.txt"
    script = f"import sys; open({str(target)!r}, 'w', encoding='utf-8').write(sys.stdin.read())"
    asyncio.run(copy_to_clipboard("Produkt\tStk", clipboard=CommandClipboard([sys.executable, "-c", script])))
    assert target.read_text(encoding="utf-8") == "Produkt\tStk"


def test_command_clipboard_nonzero_exit_is_clipboard_error():
    script = "import sys; sys.stdin.read(); sys.exit(3)"
    with pytest.raises(ClipboardError):
        asyncio.run(copy_to_clipboard("x", clipboard=CommandClipboard([sys.executable, "-c", script])))


def test_command_clipboard_without_tools(monkeypatch):
    monkeypatch.setattr(emit.shutil, "which", lambda _name: None)
    with pytest.raises(ClipboardError):
        asyncio.run(copy_to_clipboard("x", clipboard=CommandClipboard()))
