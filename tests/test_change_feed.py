import gc

import pytest

from domain.errors import PersistenceError
from services.change_feed import ChangeFeed


class CountingFeed(ChangeFeed):
    def __init__(self, table="transactions", fail_open=False):
        super().__init__(table)
        self.opened = 0
        self.closed = 0
        self.fail_open = fail_open

    def _open(self):
        if self.fail_open:
            raise PersistenceError("Realtime subscribe failed", "timeout")
        self.opened += 1

    def _close(self):
        self.closed += 1


def test_channel_opens_for_first_subscriber_and_closes_after_last():
    feed = CountingFeed()

    first = feed.subscribe(lambda: None)
    second = feed.subscribe(lambda: None)
    assert feed.opened == 1
    assert feed.subscriber_count == 2

    feed.unsubscribe(first)
    assert feed.closed == 0

    feed.unsubscribe(second)
    assert feed.closed == 1
    assert feed.subscriber_count == 0

    feed.subscribe(lambda: None)
    assert feed.opened == 2


def test_notify_calls_every_subscriber_without_payload():
    feed = CountingFeed()
    calls = []
    feed.subscribe(lambda: calls.append("a"))
    feed.subscribe(lambda: calls.append("b"))

    feed.notify()

    assert sorted(calls) == ["a", "b"]


def test_failing_callback_does_not_block_others():
    feed = CountingFeed()
    calls = []

    def broken():
        raise RuntimeError("boom")

    feed.subscribe(broken)
    feed.subscribe(lambda: calls.append("ok"))

    feed.notify()

    assert calls == ["ok"]


def test_unsubscribed_callback_is_not_called():
    feed = CountingFeed()
    calls = []
    sub = feed.subscribe(lambda: calls.append("x"))

    feed.unsubscribe(sub)
    feed.notify()

    assert calls == []


def test_unsubscribe_twice_is_harmless():
    feed = CountingFeed()
    sub = feed.subscribe(lambda: None)

    feed.unsubscribe(sub)
    feed.unsubscribe(sub)

    assert feed.closed == 1


def test_open_failure_leaves_no_subscriber_behind():
    feed = CountingFeed(fail_open=True)

    with pytest.raises(PersistenceError):
        feed.subscribe(lambda: None)

    assert feed.subscriber_count == 0


def test_subscription_records_table():
    feed = CountingFeed(table="transactions")

    sub = feed.subscribe(lambda: None)

    assert sub.table == "transactions"
    assert sub.id


class Signal:
    def __init__(self):
        self.version = 0

    def bump(self):
        self.version += 1


def test_collected_subscribers_drop_out_and_close_the_channel():
    feed = CountingFeed()
    signals = [Signal() for _ in range(100)]
    for signal in signals:
        feed.subscribe(signal.bump)
    assert feed.subscriber_count == 100

    del signals, signal
    gc.collect()

    assert feed.subscriber_count == 0
    assert feed.closed == 1


def test_live_bound_method_subscriber_is_kept_and_notified():
    feed = CountingFeed()
    alive = Signal()
    gone = Signal()
    feed.subscribe(alive.bump)
    feed.subscribe(gone.bump)

    del gone
    gc.collect()
    feed.notify()

    assert alive.version == 1
    assert feed.subscriber_count == 1
    assert feed.closed == 0


def test_new_subscriber_after_all_were_collected_reopens_channel():
    feed = CountingFeed()
    feed.subscribe(Signal().bump)
    gc.collect()

    keep = Signal()
    feed.subscribe(keep.bump)

    assert feed.opened == 2
    assert feed.closed == 1
    assert feed.subscriber_count == 1
