# tests/test_models.py

import pytest
from datetime import datetime, timezone, timedelta

from tsundoku.errors import ValidationError
from tsundoku.models import Book, BookStatus, parse_deadline, is_zero_time
from conftest import book_payload, utc


def test_parse_deadline_accepts_z_suffix():
    dt = parse_deadline("2024-01-01T00:00:00Z")
    assert dt == utc(2024, 1, 1)
    assert dt.tzinfo is not None


def test_parse_deadline_converts_offset_to_utc():
    dt = parse_deadline("2024-01-01T09:00:00+09:00")
    assert dt == utc(2024, 1, 1)


def test_parse_deadline_naive_is_utc():
    assert parse_deadline("2024-01-01T00:00:00") == utc(2024, 1, 1)


def test_parse_deadline_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_deadline("next tuesday")


def test_zero_time():
    assert is_zero_time(None)
    assert is_zero_time(parse_deadline("0001-01-01T00:00:00Z"))
    assert not is_zero_time(utc(2024, 1, 1))


def test_from_payload_defaults():
    book = Book.from_payload(book_payload(insultLevel=None))
    assert book.status == BookStatus.UNREAD
    assert book.insult_level == 3
    assert book.book_id == ""


def test_from_payload_rejects_non_numeric_level():
    with pytest.raises(ValidationError):
        Book.from_payload(book_payload(insultLevel="max"))


@pytest.mark.parametrize("field", ["title", "author", "userId", "deadline"])
def test_validate_for_create_requires_fields(field):
    book = Book.from_payload(book_payload(**{field: ""}))
    with pytest.raises(ValidationError):
        book.validate_for_create()


def test_validate_for_create_rejects_zero_deadline():
    book = Book.from_payload(book_payload(deadline="0001-01-01T00:00:00Z"))
    with pytest.raises(ValidationError):
        book.validate_for_create()


def test_validate_for_create_rejects_level_out_of_range():
    with pytest.raises(ValidationError):
        Book.from_payload(book_payload(insultLevel=6)).validate_for_create()


def test_is_overdue_is_strict():
    book = Book.from_payload(book_payload())
    assert not book.is_overdue(utc(2024, 1, 1))
    assert book.is_overdue(utc(2024, 1, 1) + timedelta(microseconds=1))


def test_to_json_uses_camel_case_and_iso_deadline():
    book = Book.from_payload(book_payload(bookId="b1"))
    d = book.to_json()
    assert d["deadline"] == "2024-01-01T00:00:00Z"
    assert d["insultLevel"] == 3
    assert d["userId"] == "u1"
    assert d["bookId"] == "b1"
    assert d["status"] == "unread"


def test_from_document_fills_missing_book_id():
    doc = Book.from_payload(book_payload()).to_document()
    doc.pop("bookId")
    book = Book.from_document(doc, "doc-9")
    assert book.book_id == "doc-9"
    assert book.deadline == utc(2024, 1, 1)
