# file_organizer/utils/thread_manager.py

import logging
import os

logger = logging.getLogger(__name__)

# Moving files is I/O-bound: threads spend most of their time waiting on the
# filesystem, so we run two workers per logical CPU.
IO_BOUND_MULTIPLIER = 2


def get_optimal_thread_count() -> int:
    """
    Determines the number of worker threads for the move pipeline.

    Returns:
        Twice the number of logical CPUs (or 2 if it cannot be determined).
    """
    # os.cpu_count() may return None on exotic platforms.
    cpu_count = os.cpu_count() or 1
    optimal_threads = cpu_count * IO_BOUND_MULTIPLIER

    logger.debug(f"System has {cpu_count} CPU cores. Worker count set to {optimal_threads}.")
    return optimal_threads
