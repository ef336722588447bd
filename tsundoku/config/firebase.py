# tsundoku/config/firebase.py
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from tsundoku.config import env_str
from tsundoku.errors import ConfigurationError


@dataclass
class FirebaseConfig:
    """Firebase Admin SDK の初期化に使うサービスアカウント設定。"""

    service_account_key_json: str = ""

    @classmethod
    def from_env(cls) -> "FirebaseConfig":
        return cls(service_account_key_json=env_str("FIREBASE_SERVICE_ACCOUNT_KEY_JSON"))

    def service_account_info(self) -> Dict[str, Any]:
        """JSON 文字列を dict に変換する。未設定・不正な JSON は起動エラー扱い。"""
        if not self.service_account_key_json:
            raise ConfigurationError("FIREBASE_SERVICE_ACCOUNT_KEY_JSON environment variable not set")
        try:
            return json.loads(self.service_account_key_json)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"invalid service account JSON: {exc}", exc) from exc
