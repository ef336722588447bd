"""
LINE Bot を用いた煽りメッセージ送信モジュール。

期限切れの積読を持つユーザーへ、LINE Messaging API の Push メッセージで
煽り文を 1 通送る。

入出力:
- 入力: 宛先の LINE ユーザー ID、本文テキスト。
- 出力: LINE への HTTP リクエスト（Push メッセージ）。

設計方針:
- 設定は `tsundoku.config.notification.LineBotConfig` で集中管理する。
- 標準ライブラリ（urllib）で HTTP を行い、追加依存を増やさない。
- 送信失敗は NotificationError で呼び出し側へ伝える。ステータス更新の可否を
  スイープ側が判断するため、ここでは握りつぶさない。
"""

from __future__ import annotations

import json
import logging
from typing import Optional
from urllib import error, request

from tsundoku.config.notification import LineBotConfig
from tsundoku.errors import NotificationError

logger = logging.getLogger(__name__)


class LinePushNotifier:
    """LINE Messaging API へ Push 通知を送る小さなヘルパークラス。

    想定ユースケース:
    - `DeadlineSweeper` が期限切れの本ごとに `push_text()` を呼び出す。
    """

    def __init__(self, cfg: Optional[LineBotConfig] = None) -> None:
        self.cfg = cfg or LineBotConfig()

    # ------------------------------------------------------------------
    # 公開API
    # ------------------------------------------------------------------
    def push_text(self, user_id: str, text: str) -> None:
        """`user_id` 宛てにテキストメッセージを 1 通送る。

        処理の流れ:
        1. トークンと宛先を検証し、欠けていれば NotificationError。
        2. Push API の JSON ペイロードを作成して POST。
        3. 200 以外・通信エラーは NotificationError に変換。
        """
        if not self._is_ready():
            raise NotificationError("LINE_CHANNEL_ACCESS_TOKEN is not set")
        if not user_id:
            raise NotificationError("LINE user id is empty")

        payload = {
            "to": user_id,
            "messages": [
                {
                    "type": "text",
                    "text": text,
                }
            ],
        }
        data = json.dumps(payload).encode("utf-8")

        req = request.Request(
            self.cfg.api_endpoint,
            data=data,
            method="POST",
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.cfg.channel_access_token}",
            },
        )

        try:
            with request.urlopen(req, timeout=self.cfg.timeout_sec) as resp:
                status = resp.status
                if status != 200:
                    body = resp.read().decode("utf-8", errors="ignore")
                    raise NotificationError(f"LINE API error: status={status} body={body}")
        except error.HTTPError as http_err:
            body = http_err.read().decode("utf-8", errors="ignore")
            raise NotificationError(
                f"LINE API error: status={http_err.code} body={body}", http_err
            ) from http_err
        except error.URLError as url_err:
            raise NotificationError(f"LINE API unreachable: {url_err.reason}", url_err) from url_err

        logger.info("[LINE] Push送信完了: to=%s", user_id)

    # ------------------------------------------------------------------
    # 内部ユーティリティ
    # ------------------------------------------------------------------
    def _is_ready(self) -> bool:
        """トークンが設定されていて送信可能か判定する。"""
        return bool(str(self.cfg.channel_access_token or "").strip())
