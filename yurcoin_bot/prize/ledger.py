from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json
import threading

from ..shared.json_store import atomic_write_json
from ..shared.logging_setup import get_logger


BALANCES_FILE = "balances.json"

log = get_logger("ledger")


@dataclass(frozen=True)
class LedgerSnapshot:
    """Point-in-time copy of the ledger, sorted by user id."""
    version: int
    records: Tuple[Tuple[int, int], ...]

    def as_dict(self) -> Dict[int, int]:
        return dict(self.records)

    def to_json(self) -> List[Dict[str, int]]:
        return [{"chat_id": uid, "balance": bal} for uid, bal in self.records]


def _parse_entries(doc: Any) -> Dict[int, int]:
    balances: Dict[int, int] = {}
    if not isinstance(doc, list):
        raise ValueError(f"expected a list of balance entries, got {type(doc).__name__}")
    for entry in doc:
        if not isinstance(entry, dict):
            continue
        uid = entry.get("chat_id", entry.get("user_id"))
        if uid is None:
            continue
        try:
            balances[int(uid)] = int(entry.get("balance", 0) or 0)
        except (TypeError, ValueError, OverflowError):
            continue
    return balances


class BalanceLedger:
    """
    Per-user YC balances:
      - memory is authoritative at runtime
      - balances.json is a best-effort copy, rewritten after each win
      - the map lock only covers dict access; disk writes happen outside it
    """

    def __init__(self, path: Path, balances: Optional[Dict[int, int]] = None):
        self.path = Path(path)
        self._balances: Dict[int, int] = dict(balances or {})
        self._version = 0
        self._lock = threading.Lock()

        # Serialises disk writes and remembers the newest snapshot on disk.
        self._write_lock = threading.Lock()
        self._written_version = -1

    @classmethod
    def load(cls, path: Path) -> "BalanceLedger":
        path = Path(path)
        try:
            contents = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls(path)
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Failed to read %s: %s", path.name, e)
            return cls(path)

        try:
            balances = _parse_entries(json.loads(contents))
        except (ValueError, RecursionError) as e:
            log.warning("Failed to parse %s: %s", path.name, e)
            return cls(path)

        log.info("Loaded %d balances from %s", len(balances), str(path))
        return cls(path, balances)

    def get(self, user_id: int) -> int:
        with self._lock:
            return self._balances.get(user_id, 0)

    def credit(self, user_id: int, amount: int) -> int:
        new_balance, _ = self.credit_and_snapshot(user_id, amount)
        return new_balance

    def credit_and_snapshot(self, user_id: int, amount: int) -> Tuple[int, LedgerSnapshot]:
        with self._lock:
            new_balance = self._balances.get(user_id, 0) + int(amount)
            self._balances[user_id] = new_balance
            self._version += 1
            return new_balance, self._snapshot_locked()

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> LedgerSnapshot:
        return LedgerSnapshot(version=self._version, records=tuple(sorted(self._balances.items())))

    def persist(self, snapshot: LedgerSnapshot) -> bool:
        """Write `snapshot` to balances.json. Never raises; False means the write failed."""
        with self._write_lock:
            if snapshot.version < self._written_version:
                # A newer snapshot already reached the disk.
                return True
            try:
                atomic_write_json(self.path, snapshot.to_json())
            except Exception:
                log.exception("Failed to save balances to %s", str(self.path))
                return False
            self._written_version = snapshot.version
            return True
