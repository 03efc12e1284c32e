"""Hand serialized text to the host: a file download or a clipboard write."""

from __future__ import annotations

import asyncio
import io
import os
import shutil
import tempfile
from pathlib import Path
from typing import Awaitable, BinaryIO, Callable, List, Optional, Protocol, Sequence

from ..config import load_settings
from ..logging import get_logger


LOG = get_logger("emit")

ClipboardWriter = Callable[[str], Awaitable[None]]


class DownloadError(Exception):
    pass


class ClipboardError(Exception):
    pass


class DownloadHost(Protocol):
    def save(self, blob: BinaryIO, file_name: str, mime_type: str) -> Path: ...


def charset_of(mime_type: str, default: str = "utf-8") -> str:
    """Return the charset parameter of a MIME type such as ``text/csv;charset=utf-8;``."""
    for part in (mime_type or "").split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


class DirectoryDownloadHost:
    """Saves downloads into a directory, replacing any file of the same name.

    The payload is staged in a temporary file next to the target and moved
    into place, so a failed save never leaves a partial file behind.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)

    def save(self, blob: BinaryIO, file_name: str, mime_type: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / os.path.basename(file_name)
        fd, tmp_path = tempfile.mkstemp(prefix=".download-", dir=self.directory)
        try:
            with os.fdopen(fd, "wb") as fh:
                shutil.copyfileobj(blob, fh)
            os.replace(tmp_path, target)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        LOG.debug(f"Saved {target} ({mime_type})")
        return target


def download(content: str, file_name: str, mime_type: str, host: Optional[DownloadHost] = None) -> Path:
    """Package ``content`` as bytes tagged with ``mime_type`` and hand it to the host.

    The in-memory payload is released on every path. ``OSError`` from the
    host surfaces as ``DownloadError``.
    """
    if host is None:
        host = DirectoryDownloadHost(load_settings().export_dir)
    data = content.encode(charset_of(mime_type))
    with io.BytesIO(data) as blob:
        try:
            path = host.save(blob, file_name, mime_type)
        except OSError as exc:
            raise DownloadError(f"Could not save {file_name}: {exc}") from exc
    LOG.info(f"Download ready: {path} ({len(data)} bytes)")
    return path


class CommandClipboard:
    """Clipboard writer that pipes text into a platform clipboard command."""

    CANDIDATES: Sequence[Sequence[str]] = (
        ("pbcopy",),
        ("wl-copy",),
        ("xclip", "-selection", "clipboard"),
        ("xsel", "--clipboard", "--input"),
        ("clip",),
    )

    def __init__(self, command: Optional[Sequence[str]] = None) -> None:
        self.command = list(command) if command else None

    def resolve(self) -> List[str]:
        if self.command:
            return self.command
        for candidate in self.CANDIDATES:
            if shutil.which(candidate[0]):
                return list(candidate)
        raise FileNotFoundError("no clipboard command available (set EXPORT_CLIPBOARD_COMMAND)")

    async def __call__(self, text: str) -> None:
        cmd = self.resolve()
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await proc.communicate(text.encode("utf-8"))
        if proc.returncode != 0:
            detail = (stderr or b"").decode("utf-8", errors="replace").strip()
            raise RuntimeError(f"{cmd[0]} exited with {proc.returncode}: {detail}")


async def copy_to_clipboard(content: str, clipboard: Optional[ClipboardWriter] = None) -> None:
    """Write ``content`` to the clipboard; any host failure raises ClipboardError."""
    writer = clipboard if clipboard is not None else CommandClipboard(load_settings().clipboard_command)
    try:
        await writer(content)
    except ClipboardError:
        raise
    except Exception as exc:
        raise ClipboardError(str(exc) or type(exc).__name__) from exc
    LOG.debug(f"Copied {len(content)} characters to clipboard")
