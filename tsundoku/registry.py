# tsundoku/registry.py
"""
本の登録・一覧・更新・削除・読了を扱うサービス。

HTTP 層からは dict（JSON ボディ）を受け取り、BookStore を直接操作する。
所有者チェックは `is_owner()` / `ensure_owner()` に一本化している。
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional

from tsundoku.errors import ForbiddenError, SchedulerError, ValidationError
from tsundoku.models import Book, BookStatus
from tsundoku.scheduler import QStashScheduler
from tsundoku.store.base import BookStore

logger = logging.getLogger(__name__)


def is_owner(book: Book, user_id: str) -> bool:
    """保存済みレコードの userId と呼び出し元が一致するか。"""
    return bool(user_id) and book.user_id == user_id


def ensure_owner(book: Book, user_id: str) -> None:
    if not is_owner(book, user_id):
        raise ForbiddenError("Unauthorized: user does not own this book")


def _require(data: Dict[str, Any], *keys: str) -> List[str]:
    values = [str(data.get(k) or "").strip() for k in keys]
    if not all(values):
        raise ValidationError(f"{' and '.join(keys)} are required")
    return values


class BookRegistry:
    def __init__(self, store: BookStore, scheduler: Optional[QStashScheduler] = None) -> None:
        self.store = store
        self.scheduler = scheduler

    def create(self, payload: Dict[str, Any]) -> Book:
        """
        本を登録し、採番済みの Book を返す。
        scheduler があれば期限時刻に発火する遅延ジョブも積む（失敗しても登録は残す）。
        """
        book = Book.from_payload(payload)
        book.validate_for_create()
        book = replace(book, book_id=self.store.new_id())
        self.store.save(book)
        logger.info("[books] Book registered: %s (Deadline: %s)", book.title, book.deadline)

        if self.scheduler is not None:
            try:
                self.scheduler.schedule_insult(book)
            except SchedulerError as exc:
                logger.error("[books] scheduling failed for %s: %s", book.book_id, exc)
        return book

    def list(self, user_id: str) -> List[Book]:
        if not user_id:
            raise ValidationError("userId query parameter is required")
        return list(self.store.list_by_owner(user_id))

    def update(self, payload: Dict[str, Any]) -> Book:
        """レコード全体を上書きする。bookId は保存済みのものを維持する。"""
        if not isinstance(payload, dict):
            raise ValidationError("request body must be a JSON object")
        book_id, user_id = _require(payload, "bookId", "userId")
        stored = self.store.get(book_id)
        ensure_owner(stored, user_id)

        book = Book.from_payload(payload)
        book.validate_for_create()
        book = replace(book, book_id=stored.book_id, user_id=stored.user_id)
        self.store.save(book)
        logger.info("[books] Book %s updated.", book_id)
        return book

    def delete(self, book_id: str, user_id: str) -> None:
        _require({"bookId": book_id, "userId": user_id}, "bookId", "userId")
        stored = self.store.get(book_id)
        ensure_owner(stored, user_id)
        self.store.delete(book_id)
        logger.info("[books] Book %s deleted.", book_id)

    def complete(self, book_id: str, user_id: str) -> None:
        _require({"bookId": book_id, "userId": user_id}, "bookId", "userId")
        stored = self.store.get(book_id)
        ensure_owner(stored, user_id)
        self.store.update_status(book_id, BookStatus.COMPLETED)
        logger.info("[books] Book %s marked as completed.", book_id)
