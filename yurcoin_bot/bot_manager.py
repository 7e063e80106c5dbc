import argparse
import random
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Optional

from .prize.catalog import ImageCatalog
from .prize.cooldown import CooldownGuard
from .prize.coordinator import DrawCoordinator
from .prize.ledger import BALANCES_FILE, BalanceLedger
from .prize.selector import DrawSelector
from .services.health_server import start_in_background
from .services.router import Reply, Router
from .services.telegram_transport import TelegramTransport, TransportError, main_keyboard, parse_update
from .shared.config import MissingTokenError, load_bot_token, load_settings, resolve_data_dir
from .shared.instance_lock import InstanceLock
from .shared.json_store import atomic_write_json, load_json
from .shared.logging_setup import get_logger, setup_logging


SERVICE_NAME = "yurcoin"
STATE_DIR = "state"
OFFSETS_FILE = "offsets.json"
LOCK_FILE = "bot.lock"


class BotManager:
    """
    Owns the long-poll loop:
      - fetch message updates
      - hand each (chat_id, text, received_at) to the worker pool
      - keep the next update offset in state/offsets.json
    """

    def __init__(
        self,
        data_dir: Path,
        settings: Dict[str, Any],
        transport: TelegramTransport,
        rng: Optional[random.Random] = None,
    ):
        self.data_dir = data_dir
        self.settings = settings
        self.transport = transport
        self.log = get_logger("bot")

        tg_cfg = settings.get("telegram") or {}
        self.poll_timeout_s = int(tg_cfg.get("poll_timeout_s", 30) or 30)
        self.max_workers = max(1, int(tg_cfg.get("max_workers", 8) or 8))

        self.catalog = ImageCatalog(data_dir)
        self.ledger = BalanceLedger.load(data_dir / BALANCES_FILE)
        self.coordinator = DrawCoordinator(CooldownGuard(), DrawSelector(self.catalog, rng), self.ledger)
        self.router = Router(self.coordinator)
        self.keyboard = main_keyboard()

        self.offsets_path = data_dir / STATE_DIR / OFFSETS_FILE
        self.offsets = load_json(self.offsets_path, {"next_update_id": 0})
        if not isinstance(self.offsets, dict):
            self.offsets = {"next_update_id": 0}

        self.pool = ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="draw")
        self._stopped = False

    # ---------- replies ----------
    def send_reply(self, chat_id: int, reply: Reply) -> None:
        if reply.photo is not None:
            ok, err = self.transport.send_photo(chat_id, reply.photo, caption=reply.text, keyboard=self.keyboard)
        else:
            ok, err = self.transport.send_message(chat_id, reply.text, keyboard=self.keyboard)
        if not ok:
            self.log.warning("Reply to chat=%s failed: %s", chat_id, err)

    def handle_message(self, chat_id: int, text: str, received_at: float) -> None:
        try:
            reply = self.router.handle(chat_id, text, received_at)
            self.send_reply(chat_id, reply)
        except Exception:
            self.log.exception("Handler error chat=%s", chat_id)

    # ---------- polling ----------
    def _save_offsets(self) -> None:
        try:
            atomic_write_json(self.offsets_path, self.offsets)
        except OSError:
            self.log.exception("Failed to save %s", str(self.offsets_path))

    def poll_once(self) -> int:
        """Fetch one batch of updates and dispatch it. Returns the number dispatched."""
        off = int(self.offsets.get("next_update_id", 0) or 0)
        updates = self.transport.get_updates(off, timeout_s=self.poll_timeout_s)
        received_at = time.monotonic()

        dispatched = 0
        next_off = off
        for u in updates:
            parsed = parse_update(u)
            if parsed is None:
                try:
                    next_off = max(next_off, int(u.get("update_id", 0) or 0) + 1)
                except (TypeError, ValueError):
                    pass
                continue
            update_id, chat_id, text = parsed
            next_off = max(next_off, update_id + 1)
            self.pool.submit(self.handle_message, chat_id, text, received_at)
            dispatched += 1

        if next_off != off:
            self.offsets["next_update_id"] = next_off
            self._save_offsets()
        return dispatched

    def run(self) -> None:
        self.log.info("Started")
        self.log.info("data_dir=%s", str(self.data_dir))
        self.log.info("balances=%s users", len(self.ledger.snapshot().records))

        while not self._stopped:
            try:
                self.poll_once()
            except TransportError as e:
                self.log.warning("getUpdates failed: %s", e)
                time.sleep(1.0)
            except Exception:
                self.log.exception("Loop error")
                time.sleep(1.0)

    def stop(self) -> None:
        self._stopped = True

    def close(self) -> None:
        self.stop()
        self.pool.shutdown(wait=True)


def main() -> int:
    parser = argparse.ArgumentParser(description="YurCoin prize-draw bot.")
    parser.add_argument("--data-dir", default=None, help="Override YURCOIN_DATA_DIR.")
    parser.add_argument("--no-http", action="store_true", help="Do not start the health-check server.")
    args = parser.parse_args()

    data_dir = Path(args.data_dir) if args.data_dir else resolve_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)

    settings = load_settings(data_dir)
    log = setup_logging(SERVICE_NAME, settings, data_dir)

    ImageCatalog(data_dir).ensure_manifest()

    try:
        token = load_bot_token(data_dir)
    except MissingTokenError as e:
        log.critical("%s", e)
        return 2

    lock = InstanceLock(data_dir / STATE_DIR / LOCK_FILE)
    if not lock.acquire():
        log.error("%s held by pid=%s. Another bot is running. Exiting.", LOCK_FILE, lock.holder_pid())
        return 1

    with lock:
        tg_cfg = settings["telegram"]
        transport = TelegramTransport(token, api_base=str(tg_cfg.get("api_base") or ""))
        mgr = BotManager(data_dir, settings, transport)

        httpd = None
        if not args.no_http:
            http_cfg = settings["http"]
            httpd, _ = start_in_background(http_cfg["host"], int(http_cfg["port"]), bool(http_cfg.get("verbose")))
            log.info("Health server on %s:%s", http_cfg["host"], http_cfg["port"])

        try:
            mgr.run()
        except KeyboardInterrupt:
            log.info("Stopping...")
        finally:
            if httpd is not None:
                httpd.shutdown()
                httpd.server_close()
            mgr.close()
            log.info("Stopped.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
