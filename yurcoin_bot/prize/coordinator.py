from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .cooldown import CooldownGuard
from .ledger import BalanceLedger
from .selector import DrawSelector
from ..shared.logging_setup import get_logger


log = get_logger("draw")


@dataclass(frozen=True)
class Throttled:
    remaining_seconds: int


@dataclass(frozen=True)
class NoAssets:
    pass


@dataclass(frozen=True)
class Won:
    asset: Path
    value: int
    new_balance: int


Outcome = Union[Throttled, NoAssets, Won]


class DrawCoordinator:
    """cooldown -> pick -> credit -> persist, short-circuiting at the first miss.

    An empty catalog still spends the user's cooldown slot.
    """

    def __init__(self, cooldown: CooldownGuard, selector: DrawSelector, ledger: BalanceLedger):
        self.cooldown = cooldown
        self.selector = selector
        self.ledger = ledger

    def attempt_draw(self, user_id: int, now: float) -> Outcome:
        decision = self.cooldown.check_and_mark(user_id, now)
        if not decision.accepted:
            return Throttled(decision.remaining_seconds)

        entry = self.selector.pick()
        if entry is None:
            log.warning("Draw for %s found no images in %s", user_id, str(self.selector.catalog.manifest_path))
            return NoAssets()

        new_balance, snapshot = self.ledger.credit_and_snapshot(user_id, entry.value)
        self.ledger.persist(snapshot)
        log.debug("user=%s won %s (+%d) balance=%d", user_id, entry.asset_path.name, entry.value, new_balance)
        return Won(asset=entry.asset_path, value=entry.value, new_balance=new_balance)

    def query_balance(self, user_id: int) -> int:
        return self.ledger.get(user_id)
