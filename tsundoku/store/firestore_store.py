"""
Firestore を用いた本レコードストア。

設計方針:
- クライアントは呼び出し側で生成して注入する（グローバル変数を持たない）。
- 複合インデックスを避けるため、検索はステータス/所有者の単一条件のみ。
  期限の比較はアプリ側（DeadlineSweeper）で行う。
- google.api_core の例外は StoreError / BookNotFoundError に変換する。
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Optional

from google.api_core import exceptions as gexc
from google.cloud.firestore_v1.base_query import FieldFilter

from tsundoku.config import BOOKS_COLLECTION, USERS_COLLECTION
from tsundoku.errors import BookNotFoundError, StoreError, ValidationError
from tsundoku.models import Book, BookStatus
from tsundoku.store.base import BookStore

logger = logging.getLogger(__name__)


class FirestoreBookStore(BookStore):
    """`books` / `users` コレクションを操作する BookStore 実装。"""

    def __init__(
        self,
        client: Any,
        books_collection: str = BOOKS_COLLECTION,
        users_collection: str = USERS_COLLECTION,
    ) -> None:
        self.client = client
        self._books = client.collection(books_collection)
        self._users = client.collection(users_collection)

    def new_id(self) -> str:
        return self._books.document().id

    def save(self, book: Book) -> None:
        if not book.book_id:
            raise StoreError("cannot save a book without bookId")
        try:
            self._books.document(book.book_id).set(book.to_document())
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error saving book to Firestore: {exc}", exc) from exc

    def get(self, book_id: str) -> Book:
        try:
            snap = self._books.document(book_id).get()
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error loading book {book_id}: {exc}", exc) from exc
        if not snap.exists:
            raise BookNotFoundError(book_id)
        return Book.from_document(snap.to_dict() or {}, snap.id)

    def list_by_owner(self, user_id: str) -> Iterator[Book]:
        query = self._books.where(filter=FieldFilter("userId", "==", user_id))
        return self._stream(query)

    def iter_by_status(self, statuses: Iterable[BookStatus]) -> Iterator[Book]:
        values = [BookStatus(s).value for s in statuses]
        if len(values) == 1:
            query = self._books.where(filter=FieldFilter("status", "==", values[0]))
        else:
            query = self._books.where(filter=FieldFilter("status", "in", values))
        return self._stream(query)

    def update_status(self, book_id: str, status: BookStatus) -> None:
        try:
            self._books.document(book_id).update({"status": BookStatus(status).value})
        except gexc.NotFound as exc:
            raise BookNotFoundError(book_id) from exc
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error updating status of {book_id}: {exc}", exc) from exc

    def delete(self, book_id: str) -> None:
        try:
            self._books.document(book_id).delete()
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error deleting book {book_id}: {exc}", exc) from exc

    def upsert_user(self, user_id: str, display_name: Optional[str] = None) -> None:
        data = {"lineUserId": user_id}
        if display_name:
            data["displayName"] = display_name
        try:
            self._users.document(user_id).set(data, merge=True)
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error upserting user {user_id}: {exc}", exc) from exc

    # ------------------------------------------------------------------
    # 内部ユーティリティ
    # ------------------------------------------------------------------
    def _stream(self, query: Any) -> Iterator[Book]:
        """クエリ結果を Book に変換して順に返す。壊れたドキュメントはログを出して飛ばす。"""
        try:
            for snap in query.stream():
                try:
                    yield Book.from_document(snap.to_dict() or {}, snap.id)
                except ValidationError as exc:
                    logger.warning("[store] Error parsing book data %s: %s", snap.id, exc)
        except gexc.GoogleAPICallError as exc:
            raise StoreError(f"error iterating documents: {exc}", exc) from exc
