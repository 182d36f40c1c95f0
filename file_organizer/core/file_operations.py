# file_organizer/core/file_operations.py

import logging
import os
import time
from pathlib import Path

from .errors import DirectoryCreationError, MoveError

# Set up a logger for this module. The CLI configures its handlers.
logger = logging.getLogger(__name__)


def _get_unique_path(destination_path: Path) -> Path:
    """
    Generates an alternate path for a destination that is already taken.

    A nanosecond timestamp is placed between the stem and the suffix, e.g.
    'report.pdf' becomes 'report_1718000000123456789.pdf'. Two files renamed
    within the same clock tick could still collide, so this is best-effort.

    Args:
        destination_path: The original intended destination path.

    Returns:
        A sibling path with a timestamped file name.
    """
    stem = destination_path.stem
    suffix = destination_path.suffix
    return destination_path.with_name(f"{stem}_{time.time_ns()}{suffix}")


class FileMover:
    """
    Moves single files into a destination directory.

    In dry-run mode nothing on disk is touched, but the path the file
    would end up at is still computed and returned.
    """

    def __init__(self, dry_run: bool = False, verbose: bool = False):
        self.dry_run = dry_run
        self.verbose = verbose

    def _trace(self, message: str):
        # Traces are user-facing in dry-run/verbose mode and log-file only otherwise.
        level = logging.INFO if (self.verbose or self.dry_run) else logging.DEBUG
        logger.log(level, message)

    def move_file(self, source_path: Path, destination_dir: Path) -> Path:
        """
        Moves source_path into destination_dir, renaming on collision.

        Args:
            source_path: The file to relocate.
            destination_dir: The directory it should end up in. It is
                created (with any missing parents) if absent.

        Returns:
            The final path of the file (or where it would be, in dry-run).

        Raises:
            DirectoryCreationError: destination_dir could not be created.
            MoveError: the rename itself failed. This includes moves across
                filesystems, which a plain rename cannot do.
        """
        # The candidate destination keeps the original file name.
        destination_path = destination_dir / source_path.name

        # Step 1: Make sure the category folder exists. A dry run only pretends.
        if not self.dry_run:
            try:
                destination_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryCreationError(f"Failed to create directory '{destination_dir}': {e}") from e

        # Step 2: Never overwrite. lexists also sees dangling symlinks, which exists() would miss.
        if os.path.lexists(destination_path):
            destination_path = _get_unique_path(destination_path)
            self._trace(f"Duplicate found: '{source_path.name}' -> renaming to '{destination_path.name}'")

        # Step 3: Report the plan, or perform the rename. os.rename is atomic within
        # one filesystem and fails with EXDEV across filesystems.
        if self.dry_run:
            logger.info(f"[DRY RUN] Would move: '{source_path.name}' -> '{destination_path}'")
            return destination_path

        self._trace(f"Moving: '{source_path.name}' -> '{destination_path}'")
        try:
            os.rename(source_path, destination_path)
        except OSError as e:
            raise MoveError(f"Failed to move '{source_path}' to '{destination_path}': {e}") from e

        return destination_path
