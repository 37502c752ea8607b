"""Disk padding manager."""

import itertools
import logging
import os
import threading
import time
from pathlib import Path
from typing import Callable, List, Optional, Set

from occupy.core.config import DiskPaddingConfig
from occupy.core.exceptions import PaddingIOError
from occupy.occupancy.fill import pattern_bytes
from occupy.utils.validation import format_bytes

logger = logging.getLogger(__name__)

PADDING_SUFFIX = ".dat"


def _never() -> bool:
    return False


class DiskPaddingManager:
    """Creates and removes padding files in a working directory.

    Only files named with the configured prefix and suffix are ever deleted,
    so the directory can be shared with unrelated files.
    """

    def __init__(self, config: DiskPaddingConfig):
        self.work_dir = Path(config.resolved_work_dir())
        self.prefix = config.file_prefix
        self.write_chunk = config.write_chunk_bytes
        self.max_file_size = config.max_file_bytes

        self._owned: Set[Path] = set()
        self._index = itertools.count()
        self._lock = threading.Lock()

    @property
    def pattern(self) -> str:
        """Glob matching every padding file, from any invocation."""
        return f"{self.prefix}*{PADDING_SUFFIX}"

    def owned_files(self) -> List[Path]:
        """Padding files created by this manager that still exist."""
        with self._lock:
            return sorted(self._owned)

    def ensure_work_dir(self):
        """Create the working directory if missing."""
        try:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PaddingIOError(f"Cannot prepare {self.work_dir}: {e}") from e

    def _next_path(self) -> Path:
        name = f"{self.prefix}{int(time.time())}_{os.getpid()}_{next(self._index)}{PADDING_SUFFIX}"
        return self.work_dir / name

    def grow(self, nbytes: int, should_stop: Optional[Callable[[], bool]] = None) -> int:
        """Write nbytes of padding, split into files of at most max_file_size.

        should_stop is polled before every file and every chunk; when it
        returns True the file in progress is deleted and grow returns. Returns
        the bytes held by files completed in this call.
        """
        if nbytes <= 0:
            return 0

        should_stop = should_stop or _never

        with self._lock:
            self.ensure_work_dir()

            written = 0
            remaining = nbytes
            while remaining > 0:
                if should_stop():
                    logger.info("Stop requested, no further padding files")
                    break

                size = min(self.max_file_size, remaining)
                path = self._next_path()
                completed = self._write_file(path, size, should_stop)
                if completed is None:
                    break

                # A failed file still counts against the request
                remaining -= size
                if completed:
                    self._owned.add(path)
                    written += size
                    logger.info(f"Created padding file {path.name} ({format_bytes(size)})")

        return written

    def _write_file(self, path: Path, size: int, should_stop: Callable[[], bool]) -> Optional[bool]:
        """Write one file.

        Returns True on success, False on an I/O error and None when a stop
        request cut the write short. Partial files never survive.
        """
        chunk = memoryview(pattern_bytes(min(self.write_chunk, size)))
        try:
            with open(path, "xb") as f:
                offset = 0
                while offset < size:
                    if should_stop():
                        break
                    length = min(len(chunk), size - offset)
                    f.write(chunk[:length])
                    offset += length
        except OSError as e:
            logger.error(f"Failed to write padding file {path.name}: {e}")
            self._remove_partial(path)
            return False

        if offset < size:
            logger.info(f"Stop requested, discarding partial padding file {path.name}")
            self._remove_partial(path)
            return None

        return True

    def _remove_partial(self, path: Path):
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"Failed to remove partial padding file {path.name}: {e}")

    def shrink_all(self) -> int:
        """Delete every padding file in the working directory.

        Returns the number of files deleted.
        """
        with self._lock:
            if not self.work_dir.is_dir():
                self._owned.clear()
                return 0

            deleted = 0
            for path in sorted(self.work_dir.glob(self.pattern)):
                try:
                    path.unlink()
                    deleted += 1
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.error(f"Failed to delete padding file {path.name}: {e}")
                    continue
                self._owned.discard(path)

            self._owned = {path for path in self._owned if path.exists()}

        if deleted:
            logger.info(f"Deleted {deleted} padding file(s) from {self.work_dir}")
        return deleted

    def cleanup(self) -> int:
        """Alias of shrink_all used on shutdown."""
        return self.shrink_all()
