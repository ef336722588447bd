# tests/test_firestore_store.py

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as gexc

from tsundoku.errors import BookNotFoundError, StoreError
from tsundoku.models import Book, BookStatus
from tsundoku.store.firestore_store import FirestoreBookStore
from conftest import utc


def snapshot(doc_id, data, exists=True):
    return SimpleNamespace(id=doc_id, exists=exists, to_dict=lambda: data)


@pytest.fixture
def client():
    client = MagicMock()
    books, users = MagicMock(name="books"), MagicMock(name="users")
    client.collection.side_effect = lambda name: {"books": books, "users": users}[name]
    client.books, client.users = books, users
    return client


def test_new_id_uses_auto_document(client):
    client.books.document.return_value.id = "auto-1"
    assert FirestoreBookStore(client).new_id() == "auto-1"


def test_save_writes_full_record(client):
    book = Book(title="t", author="a", deadline=utc(2024, 1, 1), user_id="u1", book_id="b1")
    FirestoreBookStore(client).save(book)
    client.books.document.assert_called_with("b1")
    client.books.document.return_value.set.assert_called_once_with(book.to_document())


def test_save_wraps_api_errors(client):
    client.books.document.return_value.set.side_effect = gexc.ServiceUnavailable("down")
    book = Book(title="t", author="a", deadline=utc(2024, 1, 1), user_id="u1", book_id="b1")
    with pytest.raises(StoreError):
        FirestoreBookStore(client).save(book)


def test_get_missing_book(client):
    client.books.document.return_value.get.return_value = snapshot("b1", None, exists=False)
    with pytest.raises(BookNotFoundError):
        FirestoreBookStore(client).get("b1")


def test_list_by_owner_filters_and_skips_bad_docs(client):
    good = Book(title="t", author="a", deadline=utc(2024, 1, 1), user_id="u1", book_id="b1")
    query = client.books.where.return_value
    query.stream.return_value = iter([
        snapshot("b1", good.to_document()),
        snapshot("b2", {"title": "x", "deadline": "not a date", "userId": "u1"}),
    ])

    books = list(FirestoreBookStore(client).list_by_owner("u1"))

    assert [b.book_id for b in books] == ["b1"]
    flt = client.books.where.call_args.kwargs["filter"]
    assert (flt.field_path, flt.op_string, flt.value) == ("userId", "==", "u1")


def test_iter_by_status_uses_in_for_multiple(client):
    client.books.where.return_value.stream.return_value = iter([])
    list(FirestoreBookStore(client).iter_by_status([BookStatus.UNREAD, BookStatus.INSULTED]))
    flt = client.books.where.call_args.kwargs["filter"]
    assert (flt.field_path, flt.op_string, flt.value) == ("status", "in", ["unread", "insulted"])


def test_stream_error_is_store_error(client):
    client.books.where.return_value.stream.side_effect = gexc.DeadlineExceeded("slow")
    with pytest.raises(StoreError):
        list(FirestoreBookStore(client).iter_by_status([BookStatus.UNREAD]))


def test_update_status_not_found(client):
    client.books.document.return_value.update.side_effect = gexc.NotFound("gone")
    with pytest.raises(BookNotFoundError):
        FirestoreBookStore(client).update_status("b1", BookStatus.INSULTED)


def test_update_status_writes_value(client):
    FirestoreBookStore(client).update_status("b1", BookStatus.COMPLETED)
    client.books.document.return_value.update.assert_called_once_with({"status": "completed"})


def test_upsert_user_merges(client):
    FirestoreBookStore(client).upsert_user("Uabc", "たろう")
    client.users.document.assert_called_with("Uabc")
    client.users.document.return_value.set.assert_called_once_with(
        {"lineUserId": "Uabc", "displayName": "たろう"}, merge=True
    )
