# tests/test_organizer.py

import os
import sys
import threading
from datetime import timedelta
from pathlib import Path

import pytest

from file_organizer.core import organizer as organizer_module
from file_organizer.core.errors import ConfigurationError, DirectoryListingError, MoveError
from file_organizer.core.file_operations import FileMover
from file_organizer.core.organizer import Config, Organizer, RunStats, Stats


def snapshot_tree(root: Path) -> dict:
    """Relative path -> content for every file below root."""
    return {
        str(path.relative_to(root)): path.read_bytes()
        for path in sorted(root.rglob("*")) if path.is_file()
    }


@pytest.fixture
def sample_dir(tmp_path):
    source_dir = tmp_path / "inbox"
    source_dir.mkdir()
    (source_dir / "report.pdf").write_text("report")
    (source_dir / "photo.jpg").write_text("photo")
    (source_dir / "notes.txt").write_text("notes")
    (source_dir / ".env").write_text("SECRET=1")
    return source_dir


def test_end_to_end_organization(sample_dir):
    stats = Organizer(Config(source_dir=sample_dir)).run()

    assert (sample_dir / "Documents" / "report.pdf").read_text() == "report"
    assert (sample_dir / "Documents" / "notes.txt").read_text() == "notes"
    assert (sample_dir / "Images" / "photo.jpg").read_text() == "photo"
    assert (sample_dir / ".env").read_text() == "SECRET=1"
    assert stats.moved == 3
    assert stats.failed == 0
    assert stats.skipped == 1
    assert stats.total_bytes == len("report") + len("photo") + len("notes")


def test_many_files_are_each_moved_exactly_once(tmp_path):
    extensions = [".jpg", ".pdf", ".mp3", ".mp4", ".zip", ".py", ".exe", ".ttf", ".xyz"]
    expected = {}
    for i in range(300):
        ext = extensions[i % len(extensions)]
        name = f"file{i}{ext}"
        (tmp_path / name).write_text(name)
        expected[name] = ext

    stats = Organizer(Config(source_dir=tmp_path), workers=8).run()

    assert stats.moved == 300
    assert stats.failed == 0
    assert [p for p in tmp_path.iterdir() if p.is_file()] == []

    moved = {path.name: path for path in tmp_path.rglob("*") if path.is_file()}
    assert set(moved) == set(expected)
    for name, path in moved.items():
        assert path.read_text() == name
    assert (tmp_path / "Images" / "file0.jpg").exists()
    assert (tmp_path / "Others" / "file8.xyz").exists()


def test_dry_run_changes_nothing(sample_dir):
    (sample_dir / "Images").mkdir()
    (sample_dir / "Images" / "photo.jpg").write_text("older photo")
    before = snapshot_tree(sample_dir)
    dirs_before = sorted(p.name for p in sample_dir.iterdir() if p.is_dir())

    stats = Organizer(Config(source_dir=sample_dir, dry_run=True)).run()

    assert snapshot_tree(sample_dir) == before
    assert sorted(p.name for p in sample_dir.iterdir() if p.is_dir()) == dirs_before
    assert stats.moved == 3
    assert stats.failed == 0


def test_subdirectories_are_skipped_and_counted(sample_dir):
    nested = sample_dir / "projects"
    nested.mkdir()
    (nested / "deep.pdf").write_text("deep")

    stats = Organizer(Config(source_dir=sample_dir)).run()

    assert (nested / "deep.pdf").exists()
    assert not (sample_dir / "Documents" / "deep.pdf").exists()
    assert stats.skipped == 2  # 'projects' and '.env'


def test_existing_category_folder_receives_renamed_duplicate(sample_dir):
    (sample_dir / "Documents").mkdir()
    (sample_dir / "Documents" / "report.pdf").write_text("old report")

    stats = Organizer(Config(source_dir=sample_dir)).run()

    documents = sorted(p.name for p in (sample_dir / "Documents").iterdir())
    assert "report.pdf" in documents
    assert len([name for name in documents if name.startswith("report")]) == 2
    assert (sample_dir / "Documents" / "report.pdf").read_text() == "old report"
    assert stats.moved == 3


def test_empty_directory_is_a_success(tmp_path):
    stats = Organizer(Config(source_dir=tmp_path)).run()

    assert (stats.moved, stats.skipped, stats.failed, stats.total_bytes) == (0, 0, 0, 0)
    assert list(tmp_path.iterdir()) == []


def test_missing_source_is_a_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError):
        Organizer(Config(source_dir=tmp_path / "does-not-exist")).run()


def test_file_as_source_is_a_configuration_error(tmp_path):
    not_a_dir = tmp_path / "file.txt"
    not_a_dir.write_text("x")

    with pytest.raises(ConfigurationError, match="not a directory"):
        Organizer(Config(source_dir=not_a_dir)).run()


def test_listing_failure_is_fatal_and_moves_nothing(sample_dir, monkeypatch):
    def failing_scandir(path):
        raise PermissionError(13, "Permission denied", str(path))

    monkeypatch.setattr(organizer_module.os, "scandir", failing_scandir)

    with pytest.raises(DirectoryListingError):
        Organizer(Config(source_dir=sample_dir)).run()

    assert (sample_dir / "report.pdf").exists()
    assert not (sample_dir / "Documents").exists()


class FlakyMover(FileMover):
    """Fails every file whose name starts with 'bad'."""

    def move_file(self, source_path, destination_dir):
        if source_path.name.startswith("bad"):
            raise MoveError(f"refusing to move {source_path.name}")
        return super().move_file(source_path, destination_dir)


def test_per_file_failures_do_not_abort_the_run(sample_dir):
    (sample_dir / "bad1.pdf").write_text("x")
    (sample_dir / "bad2.jpg").write_text("y")

    stats = Organizer(Config(source_dir=sample_dir), mover=FlakyMover(), workers=4).run()

    assert stats.failed == 2
    assert stats.moved == 3
    assert (sample_dir / "bad1.pdf").exists()
    assert (sample_dir / "bad2.jpg").exists()
    assert (sample_dir / "Documents" / "report.pdf").exists()


def test_unexpected_worker_error_counts_as_failure(sample_dir):
    class BrokenMover(FileMover):
        def move_file(self, source_path, destination_dir):
            raise RuntimeError("boom")

    stats = Organizer(Config(source_dir=sample_dir), mover=BrokenMover(), workers=2).run()

    assert stats.failed == 3
    assert stats.moved == 0


def test_running_program_is_not_moved(sample_dir, monkeypatch):
    program = sample_dir / "organize.py"
    program.write_text("print('hi')")
    monkeypatch.setattr(sys, "argv", [str(program)])

    stats = Organizer(Config(source_dir=sample_dir)).run()

    assert program.exists()
    assert not (sample_dir / "Code" / "organize.py").exists()
    assert stats.skipped == 2


def test_default_worker_count_is_twice_the_cpus(sample_dir):
    organizer = Organizer(Config(source_dir=sample_dir))
    assert organizer.workers == (os.cpu_count() or 1) * 2


def test_stats_counters_are_thread_safe():
    stats = Stats()

    def work():
        for _ in range(1000):
            stats.record_moved(2)
            stats.record_failed()
            stats.record_skipped()

    threads = [threading.Thread(target=work) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    result = stats.snapshot(duration=timedelta(seconds=1))
    assert isinstance(result, RunStats)
    assert (result.moved, result.failed, result.skipped, result.total_bytes) == (8000, 8000, 8000, 16000)


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX symlinks")
def test_self_referencing_symlink_does_not_crash_the_run(sample_dir):
    # 'zloop' sorts after the real files, so they are already queued when it is reached.
    loop = sample_dir / "zloop"
    os.symlink("zloop", loop)

    stats = Organizer(Config(source_dir=sample_dir)).run()

    assert (sample_dir / "Documents" / "report.pdf").exists()
    assert stats.failed == 0
    assert stats.moved == 4
    # The link itself is relocated like any other extension-less entry.
    assert os.path.islink(sample_dir / "Others" / "zloop")


def test_failures_are_warnings_in_verbose_mode(sample_dir, caplog):
    (sample_dir / "bad.pdf").write_text("x")

    with caplog.at_level("DEBUG", logger="file_organizer.core.organizer"):
        Organizer(Config(source_dir=sample_dir, verbose=True), mover=FlakyMover(), workers=2).run()

    failures = [r for r in caplog.records if "Failed to move bad.pdf" in r.getMessage()]
    assert len(failures) == 1
    assert failures[0].levelname == "WARNING"


def test_failures_are_debug_only_without_verbose(sample_dir, caplog):
    (sample_dir / "bad.pdf").write_text("x")

    with caplog.at_level("DEBUG", logger="file_organizer.core.organizer"):
        Organizer(Config(source_dir=sample_dir), mover=FlakyMover(), workers=2).run()

    failures = [r for r in caplog.records if "Failed to move bad.pdf" in r.getMessage()]
    assert len(failures) == 1
    assert failures[0].levelname == "DEBUG"


def test_validate_source_is_available_before_run(tmp_path):
    Organizer(Config(source_dir=tmp_path)).validate_source()

    with pytest.raises(ConfigurationError):
        Organizer(Config(source_dir=tmp_path / "missing")).validate_source()
