from __future__ import annotations

from pathlib import Path

import pytest

from agent_gateway.agents.virtual_files import clone_virtual_files, load_virtual_files, to_virtual_path
from agent_gateway.core.skills import resolve_skill_sources, to_backend_path


def test_resolve_skill_sources_skips_missing_and_non_directories(tmp_path: Path) -> None:
    (tmp_path / "skills").mkdir()
    (tmp_path / "notes.md").write_text("x", encoding="utf-8")

    resolved = resolve_skill_sources(
        project_root=str(tmp_path),
        requested_dirs=["./skills", "./missing", "./notes.md", "skills"],
        remote_skills_enabled=False,
    )

    assert resolved.filesystem_dirs == [str((tmp_path / "skills").resolve())]
    assert resolved.backend_skill_sources == ["/skills"]


def test_resolve_skill_sources_adds_remote_dir_when_enabled(tmp_path: Path) -> None:
    (tmp_path / "skills" / "remote").mkdir(parents=True)

    resolved = resolve_skill_sources(project_root=str(tmp_path), requested_dirs=[], remote_skills_enabled=True)

    assert resolved.backend_skill_sources == ["/skills/remote"]


def test_resolve_skill_sources_rejects_dirs_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "project"
    root.mkdir()
    (tmp_path / "elsewhere").mkdir()

    with pytest.raises(ValueError, match="inside project root"):
        resolve_skill_sources(project_root=str(root), requested_dirs=["../elsewhere"], remote_skills_enabled=False)


def test_backend_path_for_root_itself(tmp_path: Path) -> None:
    assert to_backend_path(tmp_path, tmp_path) == "/"


def test_load_virtual_files_walks_directories(tmp_path: Path) -> None:
    skill_dir = tmp_path / "skills" / "example"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text("# Example\r\nline two\n", encoding="utf-8")
    (skill_dir / "refs").mkdir()
    (skill_dir / "refs" / "notes.txt").write_text("note", encoding="utf-8")
    (skill_dir / "binary.bin").write_bytes(b"\xff\xfe\x00")

    files = load_virtual_files(project_root=str(tmp_path), directories=[str(tmp_path / "skills")])

    assert set(files) == {"/skills/example/SKILL.md", "/skills/example/refs/notes.txt"}
    skill = files["/skills/example/SKILL.md"]
    assert skill["content"] == ["# Example", "line two", ""]
    assert skill["modified_at"].endswith("Z")
    assert skill["created_at"].endswith("Z")


def test_load_virtual_files_skips_files_outside_root(tmp_path: Path) -> None:
    root = tmp_path / "project"
    root.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "a.md").write_text("a", encoding="utf-8")

    assert load_virtual_files(project_root=str(root), directories=[str(outside)]) == {}


def test_to_virtual_path_is_root_relative(tmp_path: Path) -> None:
    assert to_virtual_path(tmp_path, tmp_path / "skills" / "a.md") == "/skills/a.md"
    with pytest.raises(ValueError):
        to_virtual_path(tmp_path / "project", tmp_path / "other.md")


def test_clone_virtual_files_is_deep() -> None:
    files = {"/a.md": {"content": ["a"], "created_at": "x", "modified_at": "y"}}

    clone = clone_virtual_files(files)
    clone["/a.md"]["content"].append("b")

    assert files["/a.md"]["content"] == ["a"]
