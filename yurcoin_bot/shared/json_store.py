import json
from pathlib import Path
from typing import Any


def load_json(p: Path, default: Any) -> Any:
    try:
        if p.exists():
            return json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        pass
    return default


def atomic_write_json(p: Path, obj: Any) -> None:
    """Write `obj` as pretty JSON to `p` via `<p>.tmp` + rename.

    If the rename over an existing file fails, the destination is removed and
    the rename is retried once. When that also fails the temp file is deleted
    and the last OSError propagates to the caller.
    """
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(p.suffix + ".tmp")
    tmp.write_text(json.dumps(obj, ensure_ascii=False, indent=2), encoding="utf-8")
    try:
        tmp.replace(p)
        return
    except OSError:
        pass

    try:
        p.unlink(missing_ok=True)
        tmp.replace(p)
    except OSError:
        try:
            tmp.unlink(missing_ok=True)
        except OSError:
            pass
        raise
