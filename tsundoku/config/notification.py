"""
LINE Bot 通知に関する設定モジュール。

提供内容:
- LINE Messaging API の Push 送信で利用するトークンやエンドポイントの集中管理。
- トークンは環境変数 `LINE_CHANNEL_ACCESS_TOKEN` から読み込む。

利用方法:
- 本番は `LineBotConfig.from_env()`、テストではコンストラクタに直接値を渡す。
"""

from __future__ import annotations

from dataclasses import dataclass

from tsundoku.config import env_str


@dataclass
class LineBotConfig:
    """LINE Bot 通知設定をまとめるクラス。

    注意:
    - セキュリティ上、実トークンをリポジトリにコミットしないこと。
    """

    # LINE Messaging API のチャネルアクセストークン（長期トークンを想定）。
    channel_access_token: str = ""

    # Messaging API Push エンドポイント。通常は固定。
    api_endpoint: str = "https://api.line.me/v2/bot/message/push"

    # HTTP リクエストのタイムアウト秒数。
    timeout_sec: float = 5.0

    @classmethod
    def from_env(cls) -> "LineBotConfig":
        return cls(channel_access_token=env_str("LINE_CHANNEL_ACCESS_TOKEN"))
