import os
import shlex
from dataclasses import dataclass
from typing import Dict, List, Optional

from dotenv import dotenv_values

from .logging import get_logger
from .paths import default_export_dir, expand_abs, find_project_root

log = get_logger("config")


@dataclass
class ExportSettings:
    export_dir: str
    clipboard_command: Optional[List[str]] = None


def _find_upwards(start_dir: str, filename: str) -> Optional[str]:
    """Return first matching file found when walking up from start_dir.

    This makes running tools from subdirectories (e.g., `src/`) still find
    repository-level config files like `.env`.
    """
    d = os.path.abspath(start_dir or ".")
    while True:
        candidate = os.path.join(d, filename)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(d)
        if parent == d:
            return None
        d = parent


def _read_dotenv(dotenv_dir: str) -> Dict[str, str]:
    """Return key/value pairs of the nearest .env; does not mutate environment."""
    path = _find_upwards(dotenv_dir, ".env")
    if not path:
        log.debug(f"No .env found starting from: {os.path.abspath(dotenv_dir)}")
        return {}
    values = {k: v for k, v in dotenv_values(path).items() if v is not None}
    log.debug(f"Loaded {len(values)} key(s) from .env at {path}")
    return values


def _lookup(key: str, env: Dict[str, str]) -> Optional[str]:
    v = os.environ.get(key)
    if v and v.strip():
        return v.strip()
    v = env.get(key)
    if v and v.strip():
        return v.strip()
    return None


def load_settings(start_dir: Optional[str] = None) -> ExportSettings:
    """Build ExportSettings from the environment, falling back to .env.

    - EXPORT_DIR: target directory for downloads (default var/exports).
    - EXPORT_CLIPBOARD_COMMAND: clipboard command line, split shell-style.
    """
    start = start_dir or os.getcwd()
    env = _read_dotenv(start)

    export_dir = _lookup("EXPORT_DIR", env)
    if export_dir:
        export_dir = expand_abs(export_dir)
        log.info(f"Using EXPORT_DIR={export_dir}")
    else:
        export_dir = default_export_dir(find_project_root(start))

    clipboard_command = None
    raw_cmd = _lookup("EXPORT_CLIPBOARD_COMMAND", env)
    if raw_cmd:
        clipboard_command = shlex.split(raw_cmd)
        log.info(f"Using clipboard command from config: {clipboard_command[0]}")

    return ExportSettings(export_dir=export_dir, clipboard_command=clipboard_command)
