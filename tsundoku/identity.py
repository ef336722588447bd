# tsundoku/identity.py
"""
LINE ログインを Firebase の認証情報に橋渡しするモジュール。

LIFF から受け取った LINE アクセストークンとユーザー ID をもとに、
LINE ユーザー ID を uid とする Firebase カスタムトークンを発行する。

注意:
- LINE アクセストークンの検証（LINE の verify API 呼び出し）は行っていない。
  空でないことだけを確認している。
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from firebase_admin import auth

from tsundoku.errors import IdentityError, StoreError, ValidationError
from tsundoku.store.base import BookStore

logger = logging.getLogger(__name__)


class IdentityBridge:
    def __init__(self, firebase_app: Any = None, store: Optional[BookStore] = None) -> None:
        """
        引数:
            firebase_app: firebase_admin.App。None ならデフォルトアプリを使う。
            store: ユーザー情報の upsert 先。None なら upsert しない。
        """
        self.firebase_app = firebase_app
        self.store = store

    def issue_custom_token(
        self,
        line_access_token: str,
        line_user_id: str,
        display_name: Optional[str] = None,
    ) -> str:
        """カスタムトークン（文字列）を返す。"""
        if not line_access_token or not line_user_id:
            raise ValidationError("lineAccessToken and lineUserID are required")

        try:
            token = auth.create_custom_token(line_user_id, app=self.firebase_app)
        except Exception as exc:
            raise IdentityError(f"error creating custom token: {exc}", exc) from exc
        if isinstance(token, bytes):
            token = token.decode("utf-8")

        # トークン本体はログに残さない
        logger.info("[auth] Generated custom token for uid=%s", line_user_id)

        if display_name and self.store is not None:
            try:
                self.store.upsert_user(line_user_id, display_name)
            except StoreError as exc:
                logger.warning("[auth] user upsert failed for %s: %s", line_user_id, exc)
        return token
