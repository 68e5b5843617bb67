from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

REMOTE_SKILLS_DIR = "./skills/remote"


@dataclass(frozen=True)
class ResolvedSkills:
    filesystem_dirs: list[str] = field(default_factory=list)
    backend_skill_sources: list[str] = field(default_factory=list)


def to_backend_path(project_root: Path, absolute_dir: Path) -> str:
    """Map a directory to its root-relative backend path (``/`` for the root itself)."""

    try:
        relative = absolute_dir.relative_to(project_root)
    except ValueError as exc:
        raise ValueError(f"Skill directory must be inside project root: {absolute_dir}") from exc

    posix = relative.as_posix()
    return "/" if posix in ("", ".") else f"/{posix}"


def resolve_skill_sources(
    *,
    project_root: str,
    requested_dirs: list[str],
    remote_skills_enabled: bool,
) -> ResolvedSkills:
    root = Path(project_root).resolve()
    requested = list(requested_dirs)
    if remote_skills_enabled:
        requested.append(REMOTE_SKILLS_DIR)

    filesystem_dirs: list[str] = []
    backend_sources: list[str] = []
    for raw_dir in requested:
        absolute_dir = (root / raw_dir).resolve()
        if not absolute_dir.exists():
            logger.debug("skill directory does not exist, skipped", extra={"absolute_dir": str(absolute_dir)})
            continue
        if not absolute_dir.is_dir():
            logger.warning("skill path is not a directory, skipped", extra={"absolute_dir": str(absolute_dir)})
            continue

        backend_path = to_backend_path(root, absolute_dir)
        if str(absolute_dir) not in filesystem_dirs:
            filesystem_dirs.append(str(absolute_dir))
        if backend_path not in backend_sources:
            backend_sources.append(backend_path)

    logger.debug(
        "resolved skills",
        extra={"filesystem_dirs": filesystem_dirs, "backend_skill_sources": backend_sources},
    )
    return ResolvedSkills(filesystem_dirs=filesystem_dirs, backend_skill_sources=backend_sources)
