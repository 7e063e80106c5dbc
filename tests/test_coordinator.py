import random

from yurcoin_bot.prize.catalog import ImageCatalog
from yurcoin_bot.prize.cooldown import CooldownGuard
from yurcoin_bot.prize.coordinator import DrawCoordinator, NoAssets, Throttled, Won
from yurcoin_bot.prize.ledger import BALANCES_FILE, BalanceLedger
from yurcoin_bot.prize.selector import DrawSelector


def test_user_42_scenario(coordinator, write_manifest, data_dir):
    write_manifest("YurCoin10.png")
    asset = data_dir / "YurCoin10.png"

    assert coordinator.attempt_draw(42, 0.0) == Won(asset, 10, 10)
    assert coordinator.attempt_draw(42, 2.0) == Throttled(3)
    assert coordinator.attempt_draw(42, 6.0) == Won(asset, 10, 20)
    assert coordinator.query_balance(42) == 20


def test_win_is_persisted_before_returning(coordinator, write_manifest, data_dir):
    write_manifest("YurCoin1000.png")
    coordinator.attempt_draw(1, 0.0)
    assert BalanceLedger.load(data_dir / BALANCES_FILE).get(1) == 1000


def test_throttled_draw_does_not_change_balance(coordinator, write_manifest):
    write_manifest("YurCoin10.png")
    coordinator.attempt_draw(5, 100.0)

    out = coordinator.attempt_draw(5, 104.0)

    assert isinstance(out, Throttled)
    assert coordinator.query_balance(5) == 10


def test_empty_catalog_is_no_assets_and_spends_cooldown(coordinator, write_manifest):
    write_manifest("# nothing here", "")

    assert coordinator.attempt_draw(1, 0.0) == NoAssets()
    assert coordinator.attempt_draw(1, 1.0) == Throttled(4)
    assert coordinator.attempt_draw(1, 5.0) == NoAssets()
    assert coordinator.attempt_draw(1, 10.0) == NoAssets()
    assert coordinator.query_balance(1) == 0


def test_balance_is_sum_of_values_for_spaced_draws(data_dir, write_manifest):
    write_manifest("YurCoin0.png", "YurCoin1.png", "YurCoin10.png", "YurCoin1000.png", "other.png")
    ledger = BalanceLedger(data_dir / BALANCES_FILE)
    coord = DrawCoordinator(CooldownGuard(), DrawSelector(ImageCatalog(data_dir), random.Random(99)), ledger)

    total = 0
    for i in range(40):
        out = coord.attempt_draw(8, i * 5.0)
        assert isinstance(out, Won)
        total += out.value
        assert out.new_balance == total

    assert ledger.get(8) == total


def test_persist_failure_still_returns_win(coordinator, write_manifest, monkeypatch):
    write_manifest("YurCoin10.png")
    monkeypatch.setattr(coordinator.ledger, "persist", lambda snapshot: False)

    out = coordinator.attempt_draw(3, 0.0)

    assert isinstance(out, Won)
    assert coordinator.query_balance(3) == 10
