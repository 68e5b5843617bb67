"""Preload skill directories into the virtual-file mapping seeded into new threads."""

from __future__ import annotations

from collections import deque
import copy
from datetime import UTC, datetime
import logging
from pathlib import Path
import re
from typing import TypedDict

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r?\n")


class VirtualFile(TypedDict):
    content: list[str]
    created_at: str
    modified_at: str


VirtualFiles = dict[str, VirtualFile]


def to_virtual_path(project_root: Path, absolute_path: Path) -> str:
    try:
        relative = absolute_path.relative_to(project_root).as_posix()
    except ValueError as exc:
        raise ValueError(f"File is outside project root: {absolute_path}") from exc
    if relative in ("", "."):
        raise ValueError(f"File is outside project root: {absolute_path}")
    return f"/{relative}"


def _walk_files(directory: Path) -> list[Path]:
    queue: deque[Path] = deque([directory])
    files: list[Path] = []
    while queue:
        current = queue.popleft()
        for entry in sorted(current.iterdir()):
            if entry.is_dir():
                queue.append(entry)
            elif entry.is_file():
                files.append(entry)
    return files


def _timestamp(epoch_seconds: float) -> str:
    return datetime.fromtimestamp(epoch_seconds, tz=UTC).isoformat().replace("+00:00", "Z")


def load_virtual_files(*, project_root: str, directories: list[str]) -> VirtualFiles:
    root = Path(project_root).resolve()
    virtual_files: VirtualFiles = {}

    for directory in directories:
        for absolute_path in _walk_files(Path(directory)):
            try:
                virtual_path = to_virtual_path(root, absolute_path.resolve())
            except ValueError:
                logger.debug("skip file outside project root", extra={"path": str(absolute_path)})
                continue

            try:
                stats = absolute_path.stat()
                content = absolute_path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.debug("skip unreadable skill file", extra={"path": str(absolute_path), "error": str(exc)})
                continue

            created = getattr(stats, "st_birthtime", stats.st_ctime)
            virtual_files[virtual_path] = {
                "content": _LINE_BREAK.split(content),
                "created_at": _timestamp(created),
                "modified_at": _timestamp(stats.st_mtime),
            }

    return virtual_files


def clone_virtual_files(files: VirtualFiles) -> VirtualFiles:
    return copy.deepcopy(files)
