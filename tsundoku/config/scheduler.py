# tsundoku/config/scheduler.py
from __future__ import annotations

from dataclasses import dataclass

from tsundoku.config import env_str

WORKFLOW_CALLBACK_PATH = "/api/workflow/execute"


@dataclass
class QStashConfig:
    """Upstash QStash による遅延呼び出しの設定。

    token と public_base_url の両方が揃った場合のみ有効になる。
    """

    publish_url: str = "https://qstash.upstash.io/v2/publish"
    token: str = ""
    public_base_url: str = ""
    timeout_sec: float = 5.0

    @classmethod
    def from_env(cls) -> "QStashConfig":
        return cls(
            publish_url=env_str("QSTASH_URL", cls.publish_url) or cls.publish_url,
            token=env_str("QSTASH_TOKEN"),
            public_base_url=env_str("PUBLIC_BASE_URL"),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.public_base_url)

    @property
    def callback_url(self) -> str:
        return self.public_base_url.rstrip("/") + WORKFLOW_CALLBACK_PATH
