import os
import fcntl
import json
import time
import logging
import contextlib
from typing import Optional, Dict

from core.exceptions import PipelineLockedException

logger = logging.getLogger(__name__)

LOCK_FILE_PATH = "/tmp/pickscore_batch.lock"


class PipelineController:
    """
    Exclusive, cross-process lock for batch resolution runs (flock on a file).

    The lock file holds JSON describing the current holder ('cli' or 'api',
    pid, the period being resolved) so a refused caller can report who is
    running.
    """
    def __init__(self, lock_file: str = LOCK_FILE_PATH):
        self.lock_file = lock_file
        self.file_handle = None

    def _open_file(self):
        if not self.file_handle:
            self.file_handle = open(self.lock_file, "a+")

    def _close_file(self):
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def acquire_lock(self, source: str, metadata: Optional[Dict] = None) -> bool:
        """
        Try to take the lock without blocking.

        Args:
            source: Who is running ('cli' or 'api')
            metadata: Extra holder info (week, season, ...)

        Returns:
            True if the lock was acquired
        """
        try:
            self._open_file()
            fcntl.flock(self.file_handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            self._close_file()
            return False
        except OSError as e:
            logger.error(f"Error acquiring batch lock {self.lock_file}: {e}")
            self._close_file()
            return False

        self.file_handle.truncate(0)
        self.file_handle.seek(0)
        json.dump({
            "source": source,
            "pid": os.getpid(),
            "timestamp": time.time(),
            **(metadata or {})
        }, self.file_handle)
        self.file_handle.flush()
        return True

    def release_lock(self):
        if not self.file_handle:
            return
        try:
            self.file_handle.truncate(0)
            self.file_handle.seek(0)
            fcntl.flock(self.file_handle, fcntl.LOCK_UN)
        except OSError as e:
            logger.error(f"Error releasing batch lock {self.lock_file}: {e}")
        finally:
            self._close_file()

    def get_lock_info(self) -> Optional[Dict]:
        """Current holder info, or None if the lock file is missing, empty or corrupt."""
        if not os.path.exists(self.lock_file):
            return None

        try:
            with open(self.lock_file, "r") as f:
                content = f.read().strip()
                if not content:
                    return None
                return json.loads(content)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read batch lock info: {e}")
            return None

    @contextlib.contextmanager
    def hold(self, source: str, **metadata):
        """Hold the lock for the duration of a block; raise PipelineLockedException if taken."""
        if not self.acquire_lock(source, metadata):
            holder = self.get_lock_info() or {}
            raise PipelineLockedException(
                f"A batch run is already in progress (source={holder.get('source', 'unknown')}, "
                f"pid={holder.get('pid', 'unknown')})"
            )
        try:
            yield self
        finally:
            self.release_lock()
