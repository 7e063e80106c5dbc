import json
import os
import time
from pathlib import Path
from typing import Optional

import psutil


def pid_alive(pid: int) -> bool:
    try:
        proc = psutil.Process(pid)
        return proc.is_running() and proc.status() != psutil.STATUS_ZOMBIE
    except psutil.Error:
        return False


class InstanceLock:
    """Single-bot lock (survives crashes).

    The lock file stores the owner's PID; a lock whose PID is no longer
    running is treated as stale and cleared.
    """

    def __init__(self, path: Path):
        self.path = path
        self._fd: Optional[int] = None

    def holder_pid(self) -> int:
        try:
            info = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            return 0
        if not isinstance(info, dict):
            return 0
        try:
            return int(info.get("pid", 0) or 0)
        except (TypeError, ValueError):
            return 0

    def acquire(self) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if self.path.exists():
            pid = self.holder_pid()
            if pid and pid_alive(pid):
                return False
            try:
                self.path.unlink(missing_ok=True)
            except OSError:
                return False

        try:
            self._fd = os.open(str(self.path), os.O_CREAT | os.O_EXCL | os.O_RDWR)
        except FileExistsError:
            return False
        os.write(self._fd, json.dumps({"pid": os.getpid(), "started_ts": int(time.time())}).encode("utf-8"))
        return True

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            os.close(self._fd)
        finally:
            self._fd = None
            self.path.unlink(missing_ok=True)

    def __enter__(self) -> "InstanceLock":
        return self

    def __exit__(self, *exc) -> None:
        self.release()
