# tsundoku/sweep.py
"""
期限切れの積読を探して煽るスイープ処理。

外部スケジューラ（GitHub Actions の cron や QStash）から呼ばれる。
1 冊ごとの流れ:
  1. 煽り文を生成
  2. LINE Push で所有者へ送信
  3. 送信に成功したらステータスを insulted に更新
どこかで失敗した本はログを出して飛ばし、リトライはしない。

同時に 2 本のスイープが走った場合の二重送信は防いでいない。
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from tsundoku.errors import BookNotFoundError, NotificationError, StoreError, UnauthorizedError
from tsundoku.models import Book, BookStatus
from tsundoku.notification.line_bot import LinePushNotifier
from tsundoku.store.base import BookStore

logger = logging.getLogger(__name__)


def check_cron_secret(auth_header: Optional[str], secret: str) -> None:
    """secret が設定されていれば `Bearer <secret>` と一致することを要求する。"""
    if not secret:
        return
    expected = f"Bearer {secret}"
    if not hmac.compare_digest((auth_header or "").encode("utf-8"), expected.encode("utf-8")):
        raise UnauthorizedError("Unauthorized")


@dataclass
class SweepResult:
    overdue: int = 0
    notified: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Checked deadlines. Found {self.overdue} expired books."


class DeadlineSweeper:
    def __init__(
        self,
        store: BookStore,
        insult_writer,
        notifier: LinePushNotifier,
        statuses: Iterable[BookStatus] = (BookStatus.UNREAD,),
    ) -> None:
        self.store = store
        self.insult_writer = insult_writer
        self.notifier = notifier
        self.statuses: Tuple[BookStatus, ...] = tuple(BookStatus(s) for s in statuses)

    def run(self, now: Optional[datetime] = None) -> SweepResult:
        """対象ステータスの本を走査し、期限切れのものを煽る。

        StoreError（クエリ自体の失敗）はそのまま送出する。
        """
        now = now or datetime.now(timezone.utc)
        result = SweepResult()
        for book in self.store.iter_by_status(self.statuses):
            if not book.is_overdue(now):
                continue
            logger.info(
                "[sweep] Found expired book: %s (ID: %s, User: %s, InsultLevel: %d)",
                book.title, book.book_id, book.user_id, book.insult_level,
            )
            result.overdue += 1
            if self._insult(book):
                result.notified.append(book.book_id)
            else:
                result.failed.append(book.book_id)
        logger.info(
            "[sweep] done: overdue=%d notified=%d failed=%d",
            result.overdue, len(result.notified), len(result.failed),
        )
        return result

    def process_one(self, book_id: str, now: Optional[datetime] = None) -> bool:
        """1 冊だけ煽る（遅延ジョブのコールバック用）。煽ったら True。"""
        now = now or datetime.now(timezone.utc)
        try:
            book = self.store.get(book_id)
        except BookNotFoundError:
            logger.info("[sweep] book %s no longer exists; skipped", book_id)
            return False
        if book.status not in self.statuses:
            logger.info("[sweep] book %s is %s; skipped", book_id, book.status.value)
            return False
        if not book.is_overdue(now):
            logger.info("[sweep] book %s is not overdue yet; skipped", book_id)
            return False
        return self._insult(book)

    # ------------------------------------------------------------------
    # 内部ユーティリティ
    # ------------------------------------------------------------------
    def _insult(self, book: Book) -> bool:
        try:
            message = self.insult_writer.generate(book)
        except Exception as exc:
            logger.error("[sweep] Error generating insult for book %s: %s", book.book_id, exc)
            return False

        try:
            self.notifier.push_text(book.user_id, message)
        except NotificationError as exc:
            logger.error("[sweep] Error sending LINE message to user %s: %s", book.user_id, exc)
            return False

        try:
            self.store.update_status(book.book_id, BookStatus.INSULTED)
        except (StoreError, BookNotFoundError) as exc:
            logger.error("[sweep] Error updating status for book %s: %s", book.book_id, exc)
            return False
        return True
