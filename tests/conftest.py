import random
from pathlib import Path

import pytest

from yurcoin_bot.prize.catalog import ImageCatalog
from yurcoin_bot.prize.cooldown import CooldownGuard
from yurcoin_bot.prize.coordinator import DrawCoordinator
from yurcoin_bot.prize.ledger import BALANCES_FILE, BalanceLedger
from yurcoin_bot.prize.selector import DrawSelector


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    d = tmp_path / "data"
    d.mkdir()
    return d


@pytest.fixture
def write_manifest(data_dir: Path):
    def _write(*lines: str) -> Path:
        p = data_dir / "images.env"
        p.write_text("\n".join(lines), encoding="utf-8")
        return p
    return _write


@pytest.fixture
def catalog(data_dir: Path) -> ImageCatalog:
    return ImageCatalog(data_dir)


@pytest.fixture
def ledger(data_dir: Path) -> BalanceLedger:
    return BalanceLedger.load(data_dir / BALANCES_FILE)


@pytest.fixture
def coordinator(catalog: ImageCatalog, ledger: BalanceLedger) -> DrawCoordinator:
    return DrawCoordinator(CooldownGuard(), DrawSelector(catalog, random.Random(7)), ledger)
