# tsundoku/errors.py
"""
アプリ共通の例外クラス。

HTTP ハンドラはこれらを捕捉し、`status_code` をそのままレスポンスに使う。
区分は「リクエスト不正 (4xx)」と「内部エラー (5xx)」の 2 系統のみ。
"""

from __future__ import annotations

from typing import Optional


class TsundokuError(Exception):
    """全てのアプリ例外の基底クラス。"""

    status_code: int = 500

    def __init__(self, message: str, original_exception: Optional[Exception] = None) -> None:
        self.message = message
        self.original_exception = original_exception
        super().__init__(message)


class ValidationError(TsundokuError):
    """必須項目の欠落や形式不正。"""

    status_code = 400


class UnauthorizedError(TsundokuError):
    """Cron シークレット不一致。"""

    status_code = 401


class ForbiddenError(TsundokuError):
    """本の所有者と呼び出し元が一致しない。"""

    status_code = 403


class BookNotFoundError(TsundokuError):
    status_code = 404

    def __init__(self, book_id: str) -> None:
        self.book_id = book_id
        super().__init__(f"book not found: {book_id}")


class StoreError(TsundokuError):
    """Firestore 操作の失敗。"""


class IdentityError(TsundokuError):
    """Firebase カスタムトークン発行の失敗。"""


class NotificationError(TsundokuError):
    """LINE Push 送信の失敗。"""


class SchedulerError(TsundokuError):
    """QStash への遅延ジョブ登録の失敗。"""


class ConfigurationError(TsundokuError):
    """環境変数など、デプロイ側の設定不備。"""
