# file_organizer/core/organizer.py

import logging
import os
import queue
import stat
import sys
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import List

from .classifier import Classifier
from .errors import ConfigurationError, DirectoryListingError
from .file_operations import FileMover
from file_organizer.utils.thread_manager import get_optimal_thread_count

logger = logging.getLogger(__name__)

# Upper bound on tasks waiting in the queue. The producer blocks once it is full.
TASK_QUEUE_SIZE = 100
HIDDEN_FILE_PREFIX = "."


@dataclass(frozen=True)
class Config:
    """Run parameters, fixed before the run starts."""
    source_dir: Path
    dry_run: bool = False
    verbose: bool = False


@dataclass(frozen=True)
class FileTask:
    """One candidate file, handed to exactly one worker."""
    path: Path
    entry: os.DirEntry

    @property
    def name(self) -> str:
        return self.entry.name

    def size(self) -> int:
        try:
            return self.entry.stat(follow_symlinks=False).st_size
        except OSError:
            return 0


@dataclass(frozen=True)
class RunStats:
    moved: int = 0
    skipped: int = 0
    failed: int = 0
    total_bytes: int = 0
    duration: timedelta = timedelta(0)


class Stats:
    """
    Counters shared by every worker for the duration of one run.

    All mutation goes through a single lock, so increments from
    concurrent workers are never lost.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self.moved = 0
        self.skipped = 0
        self.failed = 0
        self.total_bytes = 0

    def record_moved(self, size: int):
        with self._lock:
            self.moved += 1
            self.total_bytes += size

    def record_skipped(self):
        with self._lock:
            self.skipped += 1

    def record_failed(self):
        with self._lock:
            self.failed += 1

    def snapshot(self, duration: timedelta) -> RunStats:
        with self._lock:
            return RunStats(self.moved, self.skipped, self.failed, self.total_bytes, duration)


def _running_program() -> Path | None:
    """The resolved path of the program we were launched as, if any."""
    if not sys.argv or not sys.argv[0]:
        return None
    try:
        return Path(sys.argv[0]).resolve()
    except (OSError, RuntimeError):
        return None


class Organizer:
    """
    Sorts the files at the top level of a directory into category
    sub-directories, using a fixed pool of worker threads.
    """

    def __init__(
            self,
            config: Config,
            classifier: Classifier | None = None,
            mover: FileMover | None = None,
            workers: int | None = None,
    ):
        self.config = config
        self.classifier = classifier if classifier is not None else Classifier()
        self.mover = mover if mover is not None else FileMover(config.dry_run, config.verbose)
        self.workers = workers if workers else get_optimal_thread_count()

    def validate_source(self):
        """
        Checks that the configured source exists and is a directory.

        Raises:
            ConfigurationError: the source path is missing, unreadable or a file.
        """
        try:
            st = os.stat(self.config.source_dir)
        except OSError as e:
            raise ConfigurationError(f"Failed to access source directory '{self.config.source_dir}': {e}") from e
        if not stat.S_ISDIR(st.st_mode):
            raise ConfigurationError(f"Source path is not a directory: {self.config.source_dir}")

    def _list_entries(self) -> List[os.DirEntry]:
        # The whole listing is read up front. If it fails, no file has been touched yet.
        try:
            with os.scandir(self.config.source_dir) as it:
                return sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            raise DirectoryListingError(f"Failed to read directory contents of '{self.config.source_dir}': {e}") from e

    def _should_skip(self, entry: os.DirEntry, program: Path | None) -> bool:
        try:
            if entry.is_dir(follow_symlinks=False):
                logger.debug(f"Skipping directory: {entry.name}")
                return True
        except OSError:
            logger.warning(f"Could not inspect '{entry.name}'. Skipping it.")
            return True

        if entry.name.startswith(HIDDEN_FILE_PREFIX):
            logger.debug(f"Skipping hidden file: {entry.name}")
            return True

        # Never move the program that is doing the moving.
        if program is not None and self._is_running_program(entry, program):
            logger.debug(f"Skipping the running program: {entry.name}")
            return True

        return False

    @staticmethod
    def _is_running_program(entry: os.DirEntry, program: Path) -> bool:
        # Resolving follows symlinks. A broken or looping link (Python < 3.13 raises
        # RuntimeError for loops) cannot be the running program, so it is not skipped.
        try:
            return Path(entry.path).resolve() == program
        except (OSError, RuntimeError):
            logger.debug(f"Could not resolve '{entry.name}'. Treating it as a regular entry.")
            return False

    def _process_file(self, task: FileTask, stats: Stats):
        destination_dir = self.classifier.destination_for(Path(self.config.source_dir), task.name)

        # The size is read before the move, while the entry still points at the file.
        size = task.size()
        try:
            self.mover.move_file(task.path, destination_dir)
        except Exception as e:
            level = logging.WARNING if self.config.verbose else logging.DEBUG
            logger.log(level, f"Failed to move {task.name}: {e}")
            stats.record_failed()
        else:
            stats.record_moved(size)

    def run(self) -> RunStats:
        """
        Executes one organization pass over the source directory.

        Returns:
            The final counters and the wall-clock duration of the run.

        Raises:
            ConfigurationError: the source path is unusable.
            DirectoryListingError: the source directory could not be listed.
        """
        start = time.perf_counter()
        self.validate_source()

        logger.debug(f"Starting file organization in: {self.config.source_dir}")
        if self.config.dry_run:
            logger.debug("Dry run: no changes will be made.")

        logger.debug("Scanning files...")
        entries = self._list_entries()

        # Counters shared by every worker, and the bounded hand-off queue between
        # the producer (this thread) and the consumers (the pool).
        stats = Stats()
        task_queue: queue.Queue = queue.Queue(maxsize=TASK_QUEUE_SIZE)

        # --- The Consumers ---
        def consumer():
            """The worker function that runs in the thread pool."""
            while True:
                task = task_queue.get()
                try:
                    if task is None:  # Sentinel: the queue is closed.
                        break
                    self._process_file(task, stats)
                except Exception as e:
                    logger.error(f"Error in consumer thread: {e}", exc_info=True)
                    stats.record_failed()
                finally:
                    task_queue.task_done()

        # --- The Producer ---
        program = _running_program()
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="organizer") as executor:
            consumers = [executor.submit(consumer) for _ in range(self.workers)]
            try:
                for entry in entries:
                    if self._should_skip(entry, program):
                        stats.record_skipped()
                        continue
                    task_queue.put(FileTask(path=Path(entry.path), entry=entry))
            finally:
                # One sentinel per worker. Each worker exits after draining the
                # tasks queued ahead of its sentinel.
                for _ in consumers:
                    task_queue.put(None)

            for future in consumers:
                future.result()

        result = stats.snapshot(timedelta(seconds=time.perf_counter() - start))
        logger.debug(
            f"Organization complete. Moved {result.moved}, skipped {result.skipped}, failed {result.failed}.")
        return result
