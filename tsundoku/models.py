# tsundoku/models.py

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from tsundoku.config import DEFAULT_INSULT_LEVEL, MAX_INSULT_LEVEL, MIN_INSULT_LEVEL
from tsundoku.errors import ValidationError


class BookStatus(str, Enum):
    UNREAD = "unread"
    READING = "reading"
    INSULTED = "insulted"
    COMPLETED = "completed"


def parse_deadline(value: Any) -> Optional[datetime]:
    """
    ISO-8601 文字列（または datetime）を UTC の aware datetime に変換する。
    空値は None。タイムゾーン無しは UTC とみなす。
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        # Python 3.10 以前の fromisoformat は "Z" を解釈しない
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValidationError(f"invalid deadline: {value}", exc) from exc
    else:
        raise ValidationError(f"invalid deadline: {value!r}")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def is_zero_time(dt: Optional[datetime]) -> bool:
    """未設定、または 0001-01-01（ゼロ時刻）なら True。"""
    return dt is None or dt.year <= 1


def format_deadline(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_insult_level(value: Any) -> int:
    if value is None or value == "":
        return DEFAULT_INSULT_LEVEL
    if isinstance(value, bool):
        raise ValidationError(f"invalid insultLevel: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"invalid insultLevel: {value!r}", exc) from exc


def _parse_status(value: Any) -> BookStatus:
    if value is None or value == "":
        return BookStatus.UNREAD
    try:
        return BookStatus(str(value).strip().lower())
    except ValueError as exc:
        raise ValidationError(f"invalid status: {value!r}", exc) from exc


@dataclass
class Book:
    """
    積読 1 冊分のレコード。Firestore の books コレクションの 1 ドキュメントに対応する。
    キー名は JSON・Firestore ともに camelCase（userId, bookId, insultLevel）。
    """
    title: str = ""
    author: str = ""
    deadline: Optional[datetime] = None
    status: BookStatus = BookStatus.UNREAD
    insult_level: int = DEFAULT_INSULT_LEVEL
    user_id: str = ""
    book_id: str = ""

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "Book":
        """
        HTTP リクエストボディから Book を組み立てる。
        形式チェックのみ行い、必須項目の検証は validate_for_create() で行う。
        """
        if not isinstance(data, dict):
            raise ValidationError("request body must be a JSON object")
        return cls(
            title=str(data.get("title") or "").strip(),
            author=str(data.get("author") or "").strip(),
            deadline=parse_deadline(data.get("deadline")),
            status=_parse_status(data.get("status")),
            insult_level=_parse_insult_level(data.get("insultLevel")),
            user_id=str(data.get("userId") or "").strip(),
            book_id=str(data.get("bookId") or "").strip(),
        )

    @classmethod
    def from_document(cls, data: Dict[str, Any], doc_id: str = "") -> "Book":
        """Firestore のドキュメント dict から復元する。bookId 欠落時はドキュメント ID で補う。"""
        book = cls.from_payload(data)
        if not book.book_id:
            book = replace(book, book_id=doc_id)
        return book

    def validate_for_create(self) -> None:
        if not self.title or not self.author or not self.user_id or is_zero_time(self.deadline):
            raise ValidationError("title, author, deadline, and userId are required")
        if not (MIN_INSULT_LEVEL <= self.insult_level <= MAX_INSULT_LEVEL):
            raise ValidationError(
                f"insultLevel must be between {MIN_INSULT_LEVEL} and {MAX_INSULT_LEVEL}"
            )

    def is_overdue(self, now: datetime) -> bool:
        """期限が now より厳密に前なら True。"""
        if is_zero_time(self.deadline):
            return False
        return self.deadline < now

    def to_document(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "deadline": self.deadline,
            "status": self.status.value,
            "insultLevel": self.insult_level,
            "userId": self.user_id,
            "bookId": self.book_id,
        }

    def to_json(self) -> Dict[str, Any]:
        doc = self.to_document()
        doc["deadline"] = format_deadline(self.deadline)
        return doc
