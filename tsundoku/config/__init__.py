# tsundoku/config (package)

import os

from dotenv import load_dotenv

# Firestore コレクション名
BOOKS_COLLECTION = "books"
USERS_COLLECTION = "users"

# HTTP サーバ
DEFAULT_PORT = 8081

# CORS（全オリジン許可。本番では絞ること）
CORS_ALLOW_ORIGIN = "*"
CORS_ALLOW_METHODS = "POST, GET, OPTIONS, PUT, DELETE"
CORS_ALLOW_HEADERS = (
    "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization"
)

# 煽りレベル（1: やさしく 〜 5: 鬼煽り）
MIN_INSULT_LEVEL = 1
MAX_INSULT_LEVEL = 5
DEFAULT_INSULT_LEVEL = 3


def load_env(path=None) -> None:
    """`.env` があれば読み込む。既存の環境変数は上書きしない。"""
    load_dotenv(dotenv_path=path, override=False)


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()
