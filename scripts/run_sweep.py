# scripts/run_sweep.py
"""
期限チェック（スイープ）を 1 回だけ手元で実行するスクリプト。

- HTTP を経由せず DeadlineSweeper を直接呼ぶ。
- --dry-run では LINE へ送らず、煽り文を標準出力に出すだけ（ステータスも更新しない）。
- --now で「現在時刻」を ISO-8601 で差し替えられる（過去/未来の確認用）。
"""
from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone

from tsundoku.config import load_env
from tsundoku.config.settings import Settings
from tsundoku.models import parse_deadline
from tsundoku.services import build_services


class PrintNotifier:
    """送信の代わりに標準出力へ書くだけの通知器（--dry-run 用）。"""

    def push_text(self, user_id: str, text: str) -> None:
        print(f"[dry-run] to={user_id}: {text}")


class ReadOnlyStore:
    """update_status だけ握りつぶすストアのラッパ（--dry-run 用）。"""

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def update_status(self, book_id, status) -> None:
        print(f"[dry-run] would set {book_id} -> {status.value}")


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="期限切れの積読を煽る（1 回実行）")
    p.add_argument("--dry-run", action="store_true", help="送信・更新せずに結果だけ表示")
    p.add_argument("--now", default=None, help="基準時刻（ISO-8601）。省略時は現在時刻")
    return p.parse_args()


def main() -> None:
    args = parse_args()
    load_env()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = Settings.from_env()
    svc = build_services(settings, notifier=PrintNotifier() if args.dry_run else None)
    if args.dry_run:
        svc.sweeper.store = ReadOnlyStore(svc.sweeper.store)

    now = parse_deadline(args.now) if args.now else datetime.now(timezone.utc)
    result = svc.sweeper.run(now=now)
    print(result.message)
    print(f"通知成功: {len(result.notified)} / 失敗: {len(result.failed)}")


if __name__ == "__main__":
    main()
