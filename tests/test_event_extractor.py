"""
Event Extractor Tests
=====================

Title grammar, fallbacks, rejection and URL construction.
"""

import pytest

from space_status.events import EventExtractor
from space_status.models.events import TopicSourceRecord

from conftest import FORUM_BASE


def topic(title: str, slug: str = "slug", topic_id: int = 1) -> TopicSourceRecord:
    return TopicSourceRecord(id=topic_id, title=title, slug=slug)


class TestParse:
    """Tests for full records."""

    def test_time_range(self, extractor):
        events = extractor.parse([
            topic("12/05/2024 18:00 - 20:00 Lockpicking Workshop", "lockpicking-night", 42)
        ])

        assert len(events) == 1
        event = events[0]
        assert event.date == "12/05/2024"
        assert event.begin == "18:00"
        assert event.end == "20:00"
        assert event.title == "Lockpicking Workshop"
        assert event.url == f"{FORUM_BASE}/t/lockpicking-night/42"

    def test_start_only(self, extractor):
        event = extractor.parse([topic("12/05/2024 18:00 General Meetup")])[0]
        assert event.date == "12/05/2024"
        assert event.begin == "18:00"
        assert event.end == ""
        assert event.title == "General Meetup"

    def test_order_preserved_and_malformed_dropped(self, extractor):
        events = extractor.parse([
            topic("01/01/2025 10:00 First", topic_id=1),
            topic("Open Social Night", topic_id=2),
            topic("Welcome", topic_id=3),
            topic("02/01/2025 11:00 - 12:00 Second", topic_id=4),
        ])
        assert [e.title for e in events] == ["First", "Second"]
        assert [e.url.rsplit("/", 1)[-1] for e in events] == ["1", "4"]

    def test_empty_input(self, extractor):
        assert extractor.parse([]) == []

    def test_trailing_slash_on_base(self):
        extractor = EventExtractor(FORUM_BASE + "/")
        event = extractor.parse([topic("12/05/2024 18:00 X", "x", 7)])[0]
        assert event.url == f"{FORUM_BASE}/t/x/7"


class TestParseTitle:
    """Tests for the per-title tokenizer."""

    @pytest.mark.parametrize("title", [
        "Open Social Night",
        "12/05/2024",
        "",
        "   ",
        "12/05/2024 evening meetup",
        "12/05/24 18:00 Short year",
        "2024/05/12 18:00 ISO-ish",
        "12/05/2024abc 18:00 Suffix",
        "12/05/2024 18:00pm Suffix",
        "12-05-2024 18:00 Dashes",
    ])
    def test_rejected(self, extractor, title):
        assert extractor.parse_title(title) is None

    def test_date_and_time_only(self, extractor):
        parsed = extractor.parse_title("12/05/2024 18:00")
        assert parsed is not None
        assert parsed.title == ""
        assert parsed.end == ""

    def test_dangling_separator(self, extractor):
        parsed = extractor.parse_title("12/05/2024 18:00 -")
        assert parsed.end == ""
        assert parsed.title == "-"

    def test_separator_without_time(self, extractor):
        parsed = extractor.parse_title("12/05/2024 18:00 - late Party")
        assert parsed.end == ""
        assert parsed.title == "- late Party"

    def test_range_with_empty_title(self, extractor):
        parsed = extractor.parse_title("12/05/2024 18:00 - 20:00")
        assert parsed.end == "20:00"
        assert parsed.title == ""

    def test_whitespace_collapsed(self, extractor):
        parsed = extractor.parse_title("  12/05/2024\t18:00   Lots   of  space ")
        assert parsed.title == "Lots of space"

    def test_lenient_calendar_by_default(self, extractor):
        parsed = extractor.parse_title("99/99/9999 18:00 Impossible")
        assert parsed is not None
        assert parsed.date == "99/99/9999"

    def test_validate_dates(self):
        strict = EventExtractor(FORUM_BASE, validate_dates=True)
        assert strict.parse_title("99/99/9999 18:00 Impossible") is None
        assert strict.parse_title("31/02/2024 18:00 Not a day") is None
        assert strict.parse_title("29/02/2024 18:00 Leap day") is not None
