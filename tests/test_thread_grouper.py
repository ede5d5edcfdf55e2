"""Tests for thread grouping: message order, thread order, participants, date parsing."""

import sys
import unittest
from datetime import datetime, timezone
from pathlib import Path

# Allow importing court_export when running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from court_export.models import EmailRecord
from court_export.threads.grouper import (
    EARLIEST,
    extract_email_addresses,
    group_by_thread,
    parse_email_date,
)


def _email(id, thread_id, date, subject="Subject", from_="a@example.com", to="b@example.com"):
    return EmailRecord(id=id, thread_id=thread_id, date=date, subject=subject, from_=from_, to=to)


class TestGroupByThread(unittest.TestCase):
    """group_by_thread ordering and aggregates."""

    def test_messages_sorted_ascending_threads_descending(self):
        emails = [
            _email("m2", "t1", "2024-01-03T10:00:00Z", subject="Re: Invoice"),
            _email("m1", "t1", "2024-01-01T10:00:00Z", subject="Invoice"),
            _email("m3", "t2", "2024-02-01T10:00:00Z", subject="Later"),
        ]
        threads = group_by_thread(emails)
        self.assertEqual([t.thread_id for t in threads], ["t2", "t1"])
        t1 = threads[1]
        self.assertEqual([m.id for m in t1.messages], ["m1", "m2"])
        self.assertEqual(t1.subject, "Invoice")
        self.assertEqual(t1.start_date, "2024-01-01T10:00:00Z")
        self.assertEqual(t1.end_date, "2024-01-03T10:00:00Z")
        self.assertEqual(t1.message_count, 2)

    def test_every_record_kept(self):
        """Duplicate ids are not collapsed; total messages equals input size."""
        emails = [
            _email("dup", "t1", "2024-01-01T10:00:00Z"),
            _email("dup", "t1", "2024-01-01T11:00:00Z"),
            _email("x", "t2", "2024-01-02T10:00:00Z"),
        ]
        threads = group_by_thread(emails)
        self.assertEqual(sum(t.message_count for t in threads), 3)

    def test_mixed_date_formats(self):
        emails = [
            _email("rfc", "t1", "Wed, 03 Jan 2024 10:00:00 +0000"),
            _email("iso", "t1", "2024-01-02T10:00:00Z"),
        ]
        (thread,) = group_by_thread(emails)
        self.assertEqual([m.id for m in thread.messages], ["iso", "rfc"])

    def test_unparseable_dates_sort_earliest(self):
        emails = [
            _email("good", "t1", "2024-01-02T10:00:00Z"),
            _email("bad", "t1", "not a date"),
            _email("other", "t2", "garbage"),
        ]
        threads = group_by_thread(emails)
        self.assertEqual(threads[0].thread_id, "t1")
        self.assertEqual([m.id for m in threads[0].messages], ["bad", "good"])
        self.assertEqual(threads[1].thread_id, "t2")

    def test_equal_dates_keep_encounter_order(self):
        emails = [
            _email("a", "t1", "2024-01-01T10:00:00Z"),
            _email("b", "t2", "2024-01-01T10:00:00Z"),
            _email("c", "t1", "2024-01-01T10:00:00Z"),
        ]
        threads = group_by_thread(emails)
        self.assertEqual([t.thread_id for t in threads], ["t1", "t2"])
        self.assertEqual([m.id for m in threads[0].messages], ["a", "c"])

    def test_participants_first_seen_order_deduplicated(self):
        emails = [
            _email("m1", "t1", "2024-01-01T10:00:00Z", from_="Alice <alice@example.com>", to="bob@example.org, Carol <carol@example.net>"),
            _email("m2", "t1", "2024-01-02T10:00:00Z", from_="bob@example.org", to="alice@example.com"),
        ]
        (thread,) = group_by_thread(emails)
        self.assertEqual(thread.participants, ["alice@example.com", "bob@example.org", "carol@example.net"])

    def test_empty_input(self):
        self.assertEqual(group_by_thread([]), [])


class TestAddressAndDateParsing(unittest.TestCase):
    def test_extract_email_addresses(self):
        self.assertEqual(
            extract_email_addresses('"Doe, Jane" <jane.doe@law-firm.com>; x_y@mail.co.uk'),
            ["jane.doe@law-firm.com", "x_y@mail.co.uk"],
        )
        self.assertEqual(extract_email_addresses(""), [])
        self.assertEqual(extract_email_addresses(None), [])
        self.assertEqual(extract_email_addresses("no addresses here"), [])

    def test_parse_email_date(self):
        self.assertEqual(
            parse_email_date("2024-01-02T10:00:00Z"),
            datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(
            parse_email_date("Tue, 02 Jan 2024 12:00:00 +0200"),
            datetime(2024, 1, 2, 10, 0, tzinfo=timezone.utc),
        )
        naive = parse_email_date("2024-01-02T10:00:00")
        self.assertEqual(naive.tzinfo, timezone.utc)
        self.assertIsNone(parse_email_date("yesterday-ish"))
        self.assertIsNone(parse_email_date(""))
        self.assertIsNone(parse_email_date(None))

    def test_earliest_precedes_real_dates(self):
        self.assertLess(EARLIEST, parse_email_date("1970-01-01T00:00:00Z"))


if __name__ == "__main__":
    unittest.main()
