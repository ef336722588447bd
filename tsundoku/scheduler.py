# tsundoku/scheduler.py
"""
Upstash QStash を使った遅延呼び出しの登録。

本の登録時に「期限の瞬間」に /api/workflow/execute を叩くジョブを積む。
期限が既に過ぎていれば遅延 0 で即時実行。
"""

from __future__ import annotations

import json
import logging
import math
from datetime import datetime, timezone
from typing import Optional
from urllib import error, request

from tsundoku.config.scheduler import QStashConfig
from tsundoku.errors import SchedulerError
from tsundoku.models import Book

logger = logging.getLogger(__name__)


def compute_delay_ms(deadline: datetime, now: datetime) -> int:
    """deadline - now をミリ秒で返す（負なら 0）。"""
    delta_ms = int((deadline - now).total_seconds() * 1000)
    return max(0, delta_ms)


def delay_header(deadline: datetime, now: datetime) -> str:
    """Upstash-Delay 用の秒数。期限より前に発火しないよう切り上げる。"""
    seconds = math.ceil((deadline - now).total_seconds())
    return f"{max(0, seconds)}s"


class QStashScheduler:
    def __init__(self, cfg: Optional[QStashConfig] = None, cron_secret: str = "") -> None:
        """cron_secret があればコールバックへ Authorization として転送させる。"""
        self.cfg = cfg or QStashConfig()
        self.cron_secret = cron_secret

    def schedule_insult(self, book: Book, now: Optional[datetime] = None) -> int:
        """遅延ジョブを登録し、指定した遅延（ミリ秒）を返す。"""
        if not self.cfg.enabled:
            raise SchedulerError("QStash is not configured (QSTASH_TOKEN / PUBLIC_BASE_URL)")
        if book.deadline is None:
            raise SchedulerError(f"book {book.book_id} has no deadline")

        now = now or datetime.now(timezone.utc)
        delay_ms = compute_delay_ms(book.deadline, now)

        payload = {
            "bookId": book.book_id,
            "userId": book.user_id,
            "insultLevel": book.insult_level,
        }
        url = f"{self.cfg.publish_url.rstrip('/')}/{self.cfg.callback_url}"
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.cfg.token}",
            "Upstash-Delay": delay_header(book.deadline, now),
        }
        if self.cron_secret:
            headers["Upstash-Forward-Authorization"] = f"Bearer {self.cron_secret}"
        req = request.Request(
            url,
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers=headers,
        )
        try:
            with request.urlopen(req, timeout=self.cfg.timeout_sec) as resp:
                status = resp.status
                if status < 200 or status >= 300:
                    body = resp.read().decode("utf-8", errors="ignore")
                    raise SchedulerError(f"QStash publish failed: status={status} body={body}")
        except error.HTTPError as http_err:
            body = http_err.read().decode("utf-8", errors="ignore")
            raise SchedulerError(
                f"QStash publish failed: status={http_err.code} body={body}", http_err
            ) from http_err
        except error.URLError as url_err:
            raise SchedulerError(f"QStash unreachable: {url_err.reason}", url_err) from url_err

        logger.info("[QStash] scheduled book=%s delay_ms=%d", book.book_id, delay_ms)
        return delay_ms
