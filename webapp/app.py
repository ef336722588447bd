"""
ツンドク・キラーの HTTP API（Flask）。

LIFF フロントエンドから呼ばれる認証・本の CRUD と、外部スケジューラから
呼ばれる期限チェック用のエンドポイントを提供する。
サービス一式は create_app() に渡し、app.extensions 経由で参照する。
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from tsundoku.config import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, CORS_ALLOW_ORIGIN
from tsundoku.errors import TsundokuError, ValidationError
from tsundoku.services import Services
from tsundoku.sweep import check_cron_secret

logger = logging.getLogger(__name__)

EXTENSION_KEY = "tsundoku"

api = Blueprint("api", __name__)


# -------------------- 共通: ユーティリティ --------------------

def services() -> Services:
    return current_app.extensions[EXTENSION_KEY]


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("error unmarshalling request body: JSON object expected")
    return data


# -------------------- ルーティング --------------------

@api.route("/")
def index():
    return "Hello from Backend!\n"


@api.route("/health")
def health():
    return "OK\n", 200


@api.route("/api/auth/line", methods=["POST"])
def auth_line():
    data = json_body()
    token = services().identity.issue_custom_token(
        str(data.get("lineAccessToken") or ""),
        str(data.get("lineUserID") or ""),
        display_name=data.get("displayName"),
    )
    return jsonify({"customToken": token})


@api.route("/api/books", methods=["GET"])
def list_books():
    books = services().registry.list(request.args.get("userId", "").strip())
    return jsonify([b.to_json() for b in books])


@api.route("/api/books", methods=["POST"])
def register_book():
    book = services().registry.create(json_body())
    return jsonify({"message": "Book registered successfully", "bookId": book.book_id}), 201


@api.route("/api/books", methods=["PUT"])
def update_book():
    services().registry.update(json_body())
    return jsonify({"message": "Book updated successfully"})


@api.route("/api/books", methods=["DELETE"])
def delete_book():
    # ボディ優先。付けられないクライアント向けにクエリも受け付ける
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.args
    services().registry.delete(
        str(data.get("bookId") or "").strip(),
        str(data.get("userId") or "").strip(),
    )
    return jsonify({"message": "Book deleted successfully"})


@api.route("/api/books/complete", methods=["POST"])
def complete_book():
    data = json_body()
    services().registry.complete(
        str(data.get("bookId") or "").strip(),
        str(data.get("userId") or "").strip(),
    )
    return jsonify({"message": "Book marked as completed"})


@api.route("/api/cron/check", methods=["GET", "POST"])
def check_deadlines():
    svc = services()
    check_cron_secret(request.headers.get("Authorization"), svc.settings.cron_secret)
    result = svc.sweeper.run()
    return jsonify({"message": result.message})


@api.route("/api/workflow/execute", methods=["POST"])
def workflow_execute():
    """QStash の遅延ジョブから呼ばれ、1 冊だけ煽る。

    QStash には Upstash-Forward-Authorization で cron シークレットを転送させている。
    """
    svc = services()
    check_cron_secret(request.headers.get("Authorization"), svc.settings.cron_secret)
    data = json_body()
    book_id = str(data.get("bookId") or "").strip()
    if not book_id:
        raise ValidationError("bookId is required")
    insulted = svc.sweeper.process_one(book_id)
    message = "Insult sent" if insulted else "Nothing to do"
    return jsonify({"message": message, "bookId": book_id})


# -------------------- アプリ生成 --------------------

def _cors_preflight():
    if request.method == "OPTIONS":
        return "", 200
    return None


def _add_cors_headers(response):
    response.headers["Access-Control-Allow-Origin"] = CORS_ALLOW_ORIGIN
    response.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    return response


def _handle_app_error(exc: TsundokuError):
    if exc.status_code >= 500:
        logger.error("[api] %s %s failed: %s", request.method, request.path, exc)
    else:
        logger.info("[api] %s %s rejected: %s", request.method, request.path, exc)
    return jsonify({"error": exc.message}), exc.status_code


def _handle_http_error(exc: HTTPException):
    return jsonify({"error": exc.description}), exc.code


def create_app(svc: Services) -> Flask:
    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = svc
    app.before_request(_cors_preflight)
    app.after_request(_add_cors_headers)
    app.register_error_handler(TsundokuError, _handle_app_error)
    app.register_error_handler(HTTPException, _handle_http_error)
    app.register_blueprint(api)
    return app
