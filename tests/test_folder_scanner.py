"""Tests for budgeted folder scanning."""

from __future__ import annotations

from pathlib import Path

import pytest

from foldsort.scanning import (
    NO_EXTENSION,
    EntryKind,
    FolderScanner,
    ScanBudget,
    ScanError,
)
from foldsort.scanning.scanner import extension_for


def _touch(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_scan_lists_children_and_skips_hidden(tmp_path: Path) -> None:
    _touch(tmp_path / "report.pdf")
    _touch(tmp_path / ".DS_Store")
    _touch(tmp_path / "code" / "main.py")
    (tmp_path / ".cache").mkdir()

    entries = FolderScanner().scan(tmp_path)

    assert [entry.name for entry in entries] == ["code", "report.pdf"]
    folder, document = entries
    assert folder.kind is EntryKind.FOLDER
    assert folder.context is not None
    assert folder.context.file_count == 1
    assert folder.context.top_extensions == [".py"]
    assert document.kind is EntryKind.FILE
    assert document.context is None


def test_scan_missing_root_raises(tmp_path: Path) -> None:
    with pytest.raises(ScanError):
        FolderScanner().scan(tmp_path / "missing")


def test_scan_file_root_raises(tmp_path: Path) -> None:
    target = _touch(tmp_path / "file.txt")

    with pytest.raises(ScanError):
        FolderScanner().scan(target)


def test_file_budget_truncates_context(tmp_path: Path) -> None:
    for group in ("a", "b", "c"):
        for index in range(4):
            _touch(tmp_path / "big" / group / f"{index}.log")

    scanner = FolderScanner(ScanBudget(max_files_scanned=5))
    context = scanner.compute_context(tmp_path / "big")

    assert context is not None
    assert context.truncated is True
    assert context.file_count <= 5


def test_small_folder_is_not_truncated(tmp_path: Path) -> None:
    _touch(tmp_path / "small" / "one.txt")

    context = FolderScanner().compute_context(tmp_path / "small")

    assert context is not None
    assert context.truncated is False


def test_depth_budget_ignores_deep_files(tmp_path: Path) -> None:
    root = tmp_path / "nested"
    _touch(root / "top.txt")
    _touch(root / "a" / "one.txt")
    _touch(root / "a" / "b" / "two.txt")
    _touch(root / "a" / "b" / "c" / "three.txt")

    context = FolderScanner(ScanBudget(max_depth=1)).compute_context(root)

    assert context is not None
    assert context.file_count == 2
    assert context.truncated is False


def test_default_depth_budget_stops_below_level_three(tmp_path: Path) -> None:
    root = tmp_path / "deep"
    _touch(root / "l1" / "l2" / "l3" / "counted.txt")
    _touch(root / "l1" / "l2" / "l3" / "l4" / "ignored.txt")

    context = FolderScanner().compute_context(root)

    assert context is not None
    assert context.file_count == 1


def test_extension_ranking_uses_first_seen_tie_break(tmp_path: Path) -> None:
    root = tmp_path / "mixed"
    for index in range(3):
        _touch(root / f"a{index}.png")
    for index in range(3):
        _touch(root / f"b{index}.md")
    for index in range(5):
        _touch(root / f"c{index}.TXT")
    _touch(root / "d0.log")

    context = FolderScanner().compute_context(root)

    assert context is not None
    assert context.file_count == 12
    assert context.top_extensions == [".txt", ".png", ".md"]


def test_markers_only_detected_at_top_level(tmp_path: Path) -> None:
    root = tmp_path / "project"
    _touch(root / "package.json", "{}")
    _touch(root / ".git" / "HEAD", "ref: refs/heads/main")
    _touch(root / ".env", "SECRET=1")
    _touch(root / "src" / "lib" / "Cargo.toml")

    context = FolderScanner().compute_context(root)

    assert context is not None
    assert context.markers == [".git", "package.json"]
    # .git/HEAD, package.json and Cargo.toml are counted; .env is hidden
    assert context.file_count == 3


def test_markers_are_capped(tmp_path: Path) -> None:
    root = tmp_path / "busy"
    names = ("Cargo.toml", "Dockerfile", "LICENSE", "Makefile", "README.md", "go.mod", "pom.xml")
    for name in names:
        _touch(root / name)

    context = FolderScanner().compute_context(root)

    assert context is not None
    assert context.markers == ["Cargo.toml", "Dockerfile", "LICENSE", "Makefile", "README.md"]


def test_custom_markers(tmp_path: Path) -> None:
    root = tmp_path / "thesis"
    _touch(root / "main.tex")

    context = FolderScanner(markers=["main.tex"]).compute_context(root)

    assert context is not None
    assert context.markers == ["main.tex"]


def test_unlistable_folder_has_no_context(tmp_path: Path) -> None:
    assert FolderScanner().compute_context(tmp_path / "missing") is None


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Photo.JPG", ".jpg"),
        ("archive.tar.gz", ".gz"),
        ("README", NO_EXTENSION),
        (".env", NO_EXTENSION),
        ("trailing.", "."),
    ],
)
def test_extension_for(name: str, expected: str) -> None:
    assert extension_for(name) == expected


def test_entry_that_cannot_be_stat_is_left_out(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _touch(tmp_path / "broken.txt")
    _touch(tmp_path / "fine.txt")
    real_stat = Path.stat

    def flaky_stat(self: Path, *args, **kwargs):
        if self.name == "broken.txt":
            raise PermissionError("denied")
        return real_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", flaky_stat)

    entries = FolderScanner().scan(tmp_path)

    assert [entry.name for entry in entries] == ["fine.txt"]


def test_unlistable_subfolder_keeps_partial_context(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    root = tmp_path / "shared"
    _touch(root / "notes.md")
    _touch(root / "locked" / "secret.txt")
    _touch(root / "open" / "readme.txt")
    real_iterdir = Path.iterdir

    def guarded_iterdir(self: Path):
        if self.name == "locked":
            raise PermissionError("denied")
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", guarded_iterdir)

    context = FolderScanner().compute_context(root)

    assert context is not None
    assert context.file_count == 2
    assert context.top_extensions == [".md", ".txt"]
    assert context.truncated is False
