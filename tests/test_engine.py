"""Tests for the tidy engine (fail-fast mode, the only mode)."""

import contextlib
import errno
import sys
from pathlib import Path

import pytest

from tidyup.config import TidyConfig
from tidyup.engine import TidyEngine, tidy_directory
from tidyup.routing import SkipReason
from tidyup.utils.errors import TidyIOError


def _names(directory):
    return sorted(p.name for p in directory.iterdir())


def test_scenario_mixed_case_and_unmapped(tmp_path):
    for name in ("a.png", "b.txt", "c.PY"):
        (tmp_path / name).write_text(name)

    report = TidyEngine().run(TidyConfig.create(tmp_path))

    assert (tmp_path / "images" / "a.png").is_file()
    assert (tmp_path / "python" / "c.PY").is_file()
    assert (tmp_path / "b.txt").is_file()
    assert not (tmp_path / "a.png").exists()
    assert report.moved_count == 2
    assert report.skipped[SkipReason.UNMAPPED] == 1
    assert report.total_files == 3


def test_include_filter(tmp_path):
    (tmp_path / "a.png").write_text("a")
    (tmp_path / "b.jpg").write_text("b")

    TidyEngine().run(TidyConfig.create(tmp_path, include=["png"]))

    assert (tmp_path / "images" / "a.png").is_file()
    assert (tmp_path / "b.jpg").is_file()


def test_exclude_wins_over_include(tmp_path):
    (tmp_path / "a.png").write_text("a")
    (tmp_path / "b.jpg").write_text("b")

    report = TidyEngine().run(
        TidyConfig.create(tmp_path, include=["png", "jpg"], exclude=["jpg"])
    )

    assert (tmp_path / "images" / "a.png").is_file()
    assert (tmp_path / "b.jpg").is_file()
    assert report.skipped[SkipReason.EXCLUDED] == 1


def test_missing_directory_fails_before_provisioning(tmp_path):
    target = tmp_path / "missing"

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(target))

    assert excinfo.value.path == target
    assert isinstance(excinfo.value.cause, FileNotFoundError)
    assert not target.exists()
    assert _names(tmp_path) == []


def test_file_as_target_is_rejected(tmp_path):
    target = tmp_path / "a.png"
    target.write_text("a")

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(target))

    assert isinstance(excinfo.value.cause, NotADirectoryError)


def test_extensionless_file_is_left_alone(tmp_path):
    (tmp_path / "noext").write_text("x")
    (tmp_path / "trailing.").write_text("x")

    report = TidyEngine().run(TidyConfig.create(tmp_path))

    assert (tmp_path / "noext").is_file()
    assert report.skipped[SkipReason.NO_EXTENSION] == 2
    assert report.moved_count == 0


def test_provisioning_is_idempotent(tmp_path):
    engine = TidyEngine()

    first = engine.provision_directories(tmp_path)
    second = engine.provision_directories(tmp_path)

    assert [p.name for p in first] == ["images", "python", "c++"]
    assert second == []
    assert _names(tmp_path) == sorted(["images", "python", "c++"])


def test_provisioning_failure_is_fatal(tmp_path):
    (tmp_path / "images").write_text("in the way")
    (tmp_path / "a.png").write_text("a")

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(tmp_path))

    assert excinfo.value.path == tmp_path / "images"
    assert (tmp_path / "a.png").is_file()


def test_subdirectories_are_not_scanned(tmp_path):
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "deep.png").write_text("deep")
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "old.png").write_text("old")
    (tmp_path / "folder.png").mkdir()

    report = TidyEngine().run(TidyConfig.create(tmp_path))

    assert (nested / "deep.png").is_file()
    assert (tmp_path / "folder.png").is_dir()
    assert _names(tmp_path / "images") == ["old.png"]
    assert report.total_files == 0


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_symlink_to_directory_is_skipped(tmp_path):
    real = tmp_path / "real"
    real.mkdir()
    (tmp_path / "link.png").symlink_to(real, target_is_directory=True)

    report = TidyEngine().run(TidyConfig.create(tmp_path))

    assert (tmp_path / "link.png").is_symlink()
    assert report.total_files == 0


def test_existing_destination_is_overwritten(tmp_path):
    (tmp_path / "images").mkdir()
    (tmp_path / "images" / "a.png").write_text("old")
    (tmp_path / "a.png").write_text("new")

    TidyEngine().run(TidyConfig.create(tmp_path))

    assert (tmp_path / "images" / "a.png").read_text() == "new"
    assert not (tmp_path / "a.png").exists()


def test_move_failure_stops_the_run(tmp_path, monkeypatch):
    (tmp_path / "a.png").write_text("a")
    (tmp_path / "b.png").write_text("b")

    def refuse(self, target):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "replace", refuse)

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(tmp_path))

    assert excinfo.value.path == tmp_path / "a.png"
    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert "Permission denied" in str(excinfo.value)
    assert (tmp_path / "b.png").is_file()


def test_listing_failure_is_fatal(tmp_path, monkeypatch):
    def unreadable(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr("tidyup.engine.os.scandir", unreadable)

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().scan_files(tmp_path)

    assert excinfo.value.path == tmp_path


def test_dry_run_changes_nothing(messy_dir):
    before = _names(messy_dir)

    report = TidyEngine().run(TidyConfig.create(messy_dir, dry_run=True))

    assert _names(messy_dir) == before
    assert report.dry_run
    assert report.moved_count == 4
    assert [p.name for p in report.folders_created] == ["images", "python", "c++"]


def test_progress_callback_sees_every_file(messy_dir):
    seen = []

    report = tidy_directory(
        TidyConfig.create(messy_dir, verbose=True),
        progress_callback=lambda i, total, result: seen.append((i, total, result.name)),
    )

    assert [name for _, _, name in seen] == sorted(
        ["a.png", "b.txt", "c.PY", "d.cpp", "noext", "photo.jpeg"]
    )
    assert seen[-1][:2] == (6, 6)
    assert report.moved_count == 4


def test_summary(messy_dir):
    summary = TidyEngine().run(TidyConfig.create(messy_dir, exclude=["cpp"])).get_summary()

    assert summary["total_files"] == 6
    assert summary["moved_files"] == 3
    assert summary["skipped_files"] == 3
    assert summary["skipped_by_reason"] == {
        "no extension": 1,
        "unmapped extension": 1,
        "in ignore list": 1,
    }
    assert summary["folders_created"] == 3
    assert summary["dry_run"] is False


def test_unstattable_directory_is_wrapped(tmp_path):
    target = tmp_path / ("x" * 300)

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(target))

    assert excinfo.value.path == target
    assert isinstance(excinfo.value.cause, OSError)
    if sys.platform != "win32":
        assert excinfo.value.cause.errno == errno.ENAMETOOLONG
    assert _names(tmp_path) == []


@pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges")
def test_symlink_to_file_is_moved(tmp_path):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    (elsewhere / "real.png").write_text("pixels")
    root = tmp_path / "root"
    root.mkdir()
    (root / "link.png").symlink_to(elsewhere / "real.png")

    report = TidyEngine().run(TidyConfig.create(root))

    moved = root / "images" / "link.png"
    assert moved.is_symlink()
    assert moved.read_text() == "pixels"
    assert not (root / "link.png").exists()
    assert (elsewhere / "real.png").is_file()
    assert report.moved_count == 1


class _UnreadableEntry:
    def __init__(self, path):
        self.name = path.name
        self.path = str(path)

    def is_file(self):
        raise PermissionError(errno.EACCES, "Permission denied", self.path)


class _Entry:
    def __init__(self, path):
        self.name = path.name
        self.path = str(path)

    def is_file(self):
        return True


def test_metadata_failure_is_fatal(tmp_path, monkeypatch):
    (tmp_path / "a.png").write_text("a")
    (tmp_path / "b.png").write_text("b")
    entries = [_UnreadableEntry(tmp_path / "a.png"), _Entry(tmp_path / "b.png")]

    monkeypatch.setattr(
        "tidyup.engine.os.scandir", lambda path: contextlib.nullcontext(entries)
    )

    with pytest.raises(TidyIOError) as excinfo:
        TidyEngine().run(TidyConfig.create(tmp_path))

    assert excinfo.value.path == tmp_path / "a.png"
    assert isinstance(excinfo.value.__cause__, PermissionError)
    assert (tmp_path / "a.png").is_file()
    assert (tmp_path / "b.png").is_file()
    assert not (tmp_path / "images" / "b.png").exists()
