import argparse
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .prize.ledger import BALANCES_FILE
from .shared.config import load_settings, resolve_data_dir
from .shared.logging_setup import resolve_log_dir


BACKUP_DIR = ".backup_clear"


def ts_stamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def is_under(child: Path, parent: Path) -> bool:
    try:
        child.resolve().relative_to(parent.resolve())
        return True
    except ValueError:
        return False


def backup_file(src: Path, backup_root: Path, data_dir: Path) -> None:
    if not src.exists():
        return
    rel = src.resolve().relative_to(data_dir.resolve())
    dst = backup_root / rel
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


def glob_files(base: Path, pattern: str) -> List[Path]:
    if not base.exists():
        return []
    return [x for x in base.rglob(pattern) if x.is_file() and BACKUP_DIR not in x.parts]


def plan(data_dir: Path, balances: bool, state: bool, logs: bool) -> tuple:
    """(to_truncate, to_delete), both restricted to files under data_dir."""
    to_truncate: List[Path] = []
    to_delete: List[Path] = []

    if balances:
        to_delete.append(data_dir / BALANCES_FILE)
        to_delete.append(data_dir / (BALANCES_FILE + ".tmp"))

    if state:
        # offsets + stale lock (delete so the bot re-inits cleanly)
        to_delete += glob_files(data_dir / "state", "*.json")
        to_delete.append(data_dir / "state" / "bot.lock")

    if logs:
        logs_dir = resolve_log_dir(data_dir, load_settings(data_dir))
        to_truncate += glob_files(logs_dir, "*.log")

    seen = set()

    def _unique(paths: List[Path]) -> List[Path]:
        out = []
        for p in paths:
            if not p.exists() or not is_under(p, data_dir):
                continue
            key = str(p.resolve())
            if key in seen:
                continue
            seen.add(key)
            out.append(p)
        return out

    return _unique(to_truncate), _unique(to_delete)


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        description="Clear YurCoin bot balances/state/logs (with optional backups). "
                    "Run this with the bot stopped."
    )
    ap.add_argument("--data-dir", default=None, help="Override YURCOIN_DATA_DIR.")
    ap.add_argument("--balances", action="store_true", help="Delete balances.json (all YC balances).")
    ap.add_argument("--state", action="store_true", help="Delete update offsets and a stale bot.lock.")
    ap.add_argument("--logs", action="store_true", help="Truncate *.log (including latest.log).")
    ap.add_argument("--all", action="store_true", help="Do everything (balances + state + logs).")
    ap.add_argument("--no-backup", action="store_true", help="Do not back up files before clearing.")
    ap.add_argument("--yes", action="store_true", help="Do not prompt for confirmation.")
    args = ap.parse_args(argv)

    data_dir = Path(args.data_dir) if args.data_dir else resolve_data_dir()
    if not data_dir.is_dir():
        print(f"[clear] ERROR: data folder not found at: {data_dir}")
        return 2

    if args.all:
        args.balances = args.state = args.logs = True

    if not (args.balances or args.state or args.logs):
        print("[clear] Nothing selected. Use --balances/--state/--logs or --all.")
        return 2

    to_truncate, to_delete = plan(data_dir, args.balances, args.state, args.logs)

    print("\n[clear] Target data dir:", data_dir)
    print("[clear] Will TRUNCATE (empty) these files:")
    for p in to_truncate:
        print("   -", p.resolve().relative_to(data_dir.resolve()))
    print("\n[clear] Will DELETE these files:")
    for p in to_delete:
        print("   -", p.resolve().relative_to(data_dir.resolve()))

    if not args.yes:
        resp = input("\nType YES to proceed: ").strip()
        if resp != "YES":
            print("[clear] Cancelled.")
            return 1

    if not args.no_backup:
        backup_root = data_dir / BACKUP_DIR / ts_stamp()
        backup_root.mkdir(parents=True, exist_ok=True)
        for p in to_truncate + to_delete:
            try:
                backup_file(p, backup_root, data_dir)
            except OSError as e:
                print(f"[clear] WARN: backup failed for {p}: {e}")
        print(f"\n[clear] Backup saved to: {backup_root}")

    rc = 0
    for p in to_truncate:
        try:
            p.write_text("", encoding="utf-8")
        except OSError as e:
            print(f"[clear] ERROR: could not truncate {p}: {e}")
            rc = 1

    for p in to_delete:
        try:
            p.unlink(missing_ok=True)
        except OSError as e:
            print(f"[clear] ERROR: could not delete {p}: {e}")
            rc = 1

    print("\n[clear] Done.")
    return rc


if __name__ == "__main__":
    raise SystemExit(main())
