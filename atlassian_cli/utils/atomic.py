"""Crash-safe file replacement.

The payload is written to a sibling temporary file which is then renamed
over the target. On POSIX, rename is atomic when source and destination
live on the same filesystem, so a reader sees either the old complete
file or the new complete file, never a partial one.
"""

import os
import time
from pathlib import Path

import structlog

log = structlog.get_logger(__name__)


def temp_path_for(path: Path) -> Path:
    """Return a unique sibling temp path: ``<path>.tmp.<pid>.<ns>``.

    The pid separates concurrent writer processes, the nanosecond clock
    separates successive writes from one process.
    """
    return path.with_name(f"{path.name}.tmp.{os.getpid()}.{time.time_ns()}")


def atomic_write(path: Path, data: bytes, mode: int = 0o600) -> None:
    """Atomically replace ``path`` with ``data``.

    Args:
        path: Target file. Its directory must already exist.
        data: Complete new file contents.
        mode: Permission bits for the new file.

    Raises:
        OSError: If creating, writing or renaming the temp file fails.
            The temp file is removed before the error propagates.
    """
    path = Path(path)
    tmp_path = temp_path_for(path)

    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        # os.open honours the umask; pin the final permissions explicitly
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        log.debug("atomic_write_aborted", path=str(path))
        raise

    log.debug("atomic_write_complete", path=str(path), size=len(data))
