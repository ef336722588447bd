"""
pytest 共通フィクスチャ

Firestore・LINE・Gemini には接続せず、メモリ上の偽物で置き換える。
"""

import itertools
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import pytest

from tsundoku.config.settings import Settings
from tsundoku.errors import BookNotFoundError, NotificationError
from tsundoku.identity import IdentityBridge
from tsundoku.models import Book, BookStatus
from tsundoku.registry import BookRegistry
from tsundoku.services import Services
from tsundoku.store.base import BookStore
from tsundoku.sweep import DeadlineSweeper


class InMemoryBookStore(BookStore):
    """dict で本を保持するだけの BookStore。"""

    def __init__(self):
        self.books: Dict[str, dict] = {}
        self.users: Dict[str, dict] = {}
        self._ids = itertools.count(1)

    def new_id(self) -> str:
        return f"book-{next(self._ids)}"

    def save(self, book: Book) -> None:
        self.books[book.book_id] = book.to_document()

    def get(self, book_id: str) -> Book:
        if book_id not in self.books:
            raise BookNotFoundError(book_id)
        return Book.from_document(self.books[book_id], book_id)

    def list_by_owner(self, user_id: str):
        for doc_id, doc in list(self.books.items()):
            if doc["userId"] == user_id:
                yield Book.from_document(doc, doc_id)

    def iter_by_status(self, statuses):
        wanted = {BookStatus(s).value for s in statuses}
        for doc_id, doc in list(self.books.items()):
            if doc["status"] in wanted:
                yield Book.from_document(doc, doc_id)

    def update_status(self, book_id: str, status: BookStatus) -> None:
        if book_id not in self.books:
            raise BookNotFoundError(book_id)
        self.books[book_id]["status"] = BookStatus(status).value

    def delete(self, book_id: str) -> None:
        self.books.pop(book_id, None)

    def upsert_user(self, user_id: str, display_name: Optional[str] = None) -> None:
        self.users.setdefault(user_id, {}).update(
            {"lineUserId": user_id, "displayName": display_name}
        )


class RecordingNotifier:
    """送信内容を記録する通知器。fail_for に入れた宛先は失敗させる。"""

    def __init__(self, fail_for=()):
        self.sent: List[Tuple[str, str]] = []
        self.fail_for = set(fail_for)

    def push_text(self, user_id: str, text: str) -> None:
        if user_id in self.fail_for:
            raise NotificationError(f"LINE API error for {user_id}")
        self.sent.append((user_id, text))


class FixedInsultWriter:
    def __init__(self, text="早く読め"):
        self.text = text
        self.calls: List[str] = []

    def generate(self, book: Book) -> str:
        self.calls.append(book.book_id)
        return self.text


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryBookStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def insult_writer():
    return FixedInsultWriter()


@pytest.fixture
def settings():
    return Settings(cron_secret="")


@pytest.fixture
def services(settings, store, notifier, insult_writer):
    return Services(
        settings=settings,
        store=store,
        registry=BookRegistry(store),
        sweeper=DeadlineSweeper(store, insult_writer, notifier, settings.sweep_statuses),
        identity=IdentityBridge(firebase_app=None, store=store),
    )


@pytest.fixture
def client(services):
    from webapp.app import create_app

    app = create_app(services)
    app.config["TESTING"] = True
    return app.test_client()


def book_payload(**overrides) -> dict:
    data = {
        "title": "吾輩は猫である",
        "author": "夏目漱石",
        "deadline": "2024-01-01T00:00:00Z",
        "insultLevel": 3,
        "userId": "u1",
    }
    data.update(overrides)
    return data
