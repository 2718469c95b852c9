"""Reading log files from disk.

Paths are resolved under ``LOG_RCA_BASE_DIR`` (default: current directory)
so MCP clients cannot read arbitrary files.
"""

from __future__ import annotations

import gzip
import os
from contextlib import asynccontextmanager
from pathlib import Path

import aiofiles
from aiofiles.threadpool import wrap

BASE_DIR_ENV = "LOG_RCA_BASE_DIR"
ALLOWED_FILE_SUFFIXES = {".log", ".txt", ".out", ".err"}
TEXT_ENCODING = "utf-8"
TEXT_ERRORS = "replace"


def base_dir() -> Path:
    """Return the resolved base directory for log files."""
    raw = os.getenv(BASE_DIR_ENV, os.getcwd())
    return Path(raw).resolve()


def _allowed_suffix(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".gz":
        suffix = path.with_suffix("").suffix.lower()
    return suffix


def resolve_log_path(path: str | Path) -> Path:
    """Resolve ``path`` under the base dir and validate it is a log file."""
    base = base_dir()
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base / p
    p = p.resolve()
    if base not in p.parents and p != base:
        raise ValueError("Path escapes base dir")
    if not p.is_file():
        raise FileNotFoundError(f"Log file not found: {p}")
    if _allowed_suffix(p) not in ALLOWED_FILE_SUFFIXES:
        allowed = ", ".join(sorted(ALLOWED_FILE_SUFFIXES))
        raise ValueError(f"File type not allowed. Allowed: {allowed} (optionally .gz).")
    return p


@asynccontextmanager
async def _open_text(path: Path):
    """Open a log file for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        af = wrap(gzip.open(path, mode="rt", encoding=TEXT_ENCODING, errors=TEXT_ERRORS))
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=TEXT_ENCODING, errors=TEXT_ERRORS) as f:
            yield f


async def read_text_file(path: str | Path) -> str:
    """Return the contents of a plain or gzip text file, with no base-dir check."""
    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"Log file not found: {p}")
    async with _open_text(p) as f:
        return await f.read()


async def read_log_text(path: str | Path) -> str:
    """Return the full contents of a log file inside the base dir."""
    return await read_text_file(resolve_log_path(path))
