# tsundoku/config/settings.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from tsundoku.config import DEFAULT_PORT, env_str
from tsundoku.config.firebase import FirebaseConfig
from tsundoku.config.llm import InsultConfig
from tsundoku.config.notification import LineBotConfig
from tsundoku.config.scheduler import QStashConfig
from tsundoku.errors import ConfigurationError
from tsundoku.models import BookStatus

DEFAULT_SWEEP_STATUSES: Tuple[BookStatus, ...] = (BookStatus.UNREAD,)


def parse_statuses(raw: str) -> Tuple[BookStatus, ...]:
    """カンマ区切りのステータス文字列（例: unread,insulted）を BookStatus のタプルにする。"""
    items = [s.strip().lower() for s in raw.split(",") if s.strip()]
    if not items:
        return DEFAULT_SWEEP_STATUSES
    try:
        return tuple(BookStatus(s) for s in items)
    except ValueError as exc:
        raise ConfigurationError(f"invalid SWEEP_STATUSES: {raw}", exc) from exc


@dataclass
class Settings:
    """アプリ全体の設定。各領域の設定クラスを束ねる。"""

    cron_secret: str = ""
    sweep_statuses: Tuple[BookStatus, ...] = DEFAULT_SWEEP_STATUSES
    port: int = DEFAULT_PORT
    line: LineBotConfig = field(default_factory=LineBotConfig)
    insult: InsultConfig = field(default_factory=InsultConfig)
    firebase: FirebaseConfig = field(default_factory=FirebaseConfig)
    qstash: QStashConfig = field(default_factory=QStashConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        port_raw = env_str("PORT", str(DEFAULT_PORT))
        try:
            port = int(port_raw)
        except ValueError as exc:
            raise ConfigurationError(f"invalid PORT: {port_raw}", exc) from exc
        return cls(
            cron_secret=env_str("CRON_SECRET"),
            sweep_statuses=parse_statuses(env_str("SWEEP_STATUSES")),
            port=port,
            line=LineBotConfig.from_env(),
            insult=InsultConfig.from_env(),
            firebase=FirebaseConfig.from_env(),
            qstash=QStashConfig.from_env(),
        )
