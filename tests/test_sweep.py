# tests/test_sweep.py

import pytest

from tsundoku.errors import UnauthorizedError
from tsundoku.models import BookStatus
from tsundoku.registry import BookRegistry
from tsundoku.sweep import DeadlineSweeper, check_cron_secret
from conftest import RecordingNotifier, book_payload, utc

LATER = utc(2024, 6, 1)


@pytest.fixture
def registry(store):
    return BookRegistry(store)


@pytest.fixture
def sweeper(store, insult_writer, notifier):
    return DeadlineSweeper(store, insult_writer, notifier)


def test_overdue_book_is_insulted(registry, sweeper, store, notifier):
    book = registry.create(book_payload())
    result = sweeper.run(now=LATER)
    assert result.overdue == 1
    assert result.notified == [book.book_id]
    assert notifier.sent == [("u1", "早く読め")]
    assert store.books[book.book_id]["status"] == "insulted"


def test_book_due_exactly_now_is_not_overdue(registry, sweeper, notifier):
    registry.create(book_payload())
    result = sweeper.run(now=utc(2024, 1, 1))
    assert result.overdue == 0
    assert notifier.sent == []


def test_future_books_are_skipped(registry, sweeper, notifier):
    registry.create(book_payload(deadline="2030-01-01T00:00:00Z"))
    assert sweeper.run(now=LATER).overdue == 0
    assert notifier.sent == []


def test_push_failure_keeps_status_and_continues(registry, store, insult_writer):
    notifier = RecordingNotifier(fail_for={"u1"})
    sweeper = DeadlineSweeper(store, insult_writer, notifier)
    failing = registry.create(book_payload())
    ok = registry.create(book_payload(userId="u2"))

    result = sweeper.run(now=LATER)

    assert result.overdue == 2
    assert result.failed == [failing.book_id]
    assert result.notified == [ok.book_id]
    assert store.books[failing.book_id]["status"] == "unread"
    assert store.books[ok.book_id]["status"] == "insulted"


class ExplodingWriter:
    def generate(self, book):
        raise RuntimeError("generator down")


def test_generation_failure_is_skipped(registry, store, notifier):
    book = registry.create(book_payload())
    sweeper = DeadlineSweeper(store, ExplodingWriter(), notifier)
    result = sweeper.run(now=LATER)
    assert result.overdue == 1
    assert result.failed == [book.book_id]
    assert notifier.sent == []


def test_insulted_and_completed_books_are_not_rescanned(registry, sweeper, notifier):
    registry.create(book_payload())
    done = registry.create(book_payload(title="こころ"))
    registry.complete(done.book_id, "u1")

    first = sweeper.run(now=LATER)
    second = sweeper.run(now=LATER)

    assert first.overdue == 1
    assert second.overdue == 0
    assert [to for to, _ in notifier.sent] == ["u1"]


def test_statuses_can_include_insulted(registry, store, notifier, insult_writer):
    registry.create(book_payload())
    sweeper = DeadlineSweeper(
        store, insult_writer, notifier, statuses=(BookStatus.UNREAD, BookStatus.INSULTED)
    )
    sweeper.run(now=LATER)
    assert sweeper.run(now=LATER).overdue == 1
    assert len(notifier.sent) == 2


def test_process_one(registry, sweeper, store, notifier):
    book = registry.create(book_payload())
    assert sweeper.process_one(book.book_id, now=LATER)
    assert store.books[book.book_id]["status"] == "insulted"
    # 2 回目は insulted なので対象外
    assert not sweeper.process_one(book.book_id, now=LATER)
    assert len(notifier.sent) == 1


def test_process_one_skips_missing_and_not_due(registry, sweeper, notifier):
    assert not sweeper.process_one("missing", now=LATER)
    book = registry.create(book_payload(deadline="2030-01-01T00:00:00Z"))
    assert not sweeper.process_one(book.book_id, now=LATER)
    assert notifier.sent == []


def test_check_cron_secret():
    check_cron_secret(None, "")
    check_cron_secret("Bearer s3cret", "s3cret")
    with pytest.raises(UnauthorizedError):
        check_cron_secret(None, "s3cret")
    with pytest.raises(UnauthorizedError):
        check_cron_secret("Bearer wrong", "s3cret")


def test_result_message(registry, sweeper):
    registry.create(book_payload())
    assert sweeper.run(now=LATER).message == "Checked deadlines. Found 1 expired books."
