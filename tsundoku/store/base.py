# tsundoku/store/base.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Optional

from tsundoku.models import Book, BookStatus


class BookStore(ABC):
    """
    本レコードの永続化インターフェース。

    - 一覧系は Book のイテレータを返す。終端は通常のイテレータ終了で表す。
    - 実装は SDK 由来の例外を StoreError に包んで送出する。
    - 存在しない bookId を指定した get/update_status は BookNotFoundError。
    """

    @abstractmethod
    def new_id(self) -> str:
        ...

    @abstractmethod
    def save(self, book: Book) -> None:
        ...

    @abstractmethod
    def get(self, book_id: str) -> Book:
        ...

    @abstractmethod
    def list_by_owner(self, user_id: str) -> Iterator[Book]:
        ...

    @abstractmethod
    def iter_by_status(self, statuses: Iterable[BookStatus]) -> Iterator[Book]:
        ...

    @abstractmethod
    def update_status(self, book_id: str, status: BookStatus) -> None:
        ...

    @abstractmethod
    def delete(self, book_id: str) -> None:
        ...

    @abstractmethod
    def upsert_user(self, user_id: str, display_name: Optional[str] = None) -> None:
        ...
