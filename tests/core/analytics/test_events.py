"""
Tests for the analytics event model.
"""
import pytest

from core.analytics.events import AnalyticsEvent, CommonEvents, ContentViewEvent, ErrorEvent


class TestAnalyticsEvent:
    """Test cases for AnalyticsEvent."""

    def test_defaults(self):
        """Test a bare event."""
        event = AnalyticsEvent("Something Happened")

        assert event.name == "Something Happened"
        assert event.attributes is None
        assert event.timed is False
        assert event.priority == 0
        assert event.get_attribute("missing") is None

    def test_put_attribute_keeps_insertion_order(self):
        """Test attributes are created lazily and keep their order."""
        event = AnalyticsEvent("ordered").put_attribute("b", 1).put_attribute("a", 2).put_attribute("c", 3)

        assert list(event.attributes) == ["b", "a", "c"]
        assert event.get_attribute("a") == 2

    def test_put_attribute_overwrites(self):
        event = AnalyticsEvent("dupe").put_attribute("key", 1).put_attribute("key", 2)

        assert event.attributes == {"key": 2}

    def test_builder_setters(self):
        """Test timed/priority setters chain."""
        event = AnalyticsEvent("built").set_timed(True).set_priority(7)

        assert event.timed is True
        assert event.priority == 7

    @pytest.mark.parametrize("name", ["", "   "])
    def test_name_required(self, name):
        with pytest.raises(ValueError):
            AnalyticsEvent(name)

    def test_equality(self):
        first = AnalyticsEvent("same").put_attribute("x", 1)
        second = AnalyticsEvent("same").put_attribute("x", 1)

        assert first == second
        assert first != AnalyticsEvent("same").put_attribute("x", 2)

    def test_fingerprint_is_stable(self):
        """Test equal events share a fingerprint and different events do not."""
        first = AnalyticsEvent("same").put_attribute("x", 1)
        second = AnalyticsEvent("same").put_attribute("x", 1)

        assert first.fingerprint() == second.fingerprint()
        assert len(first.fingerprint()) == 16
        assert first.fingerprint() != AnalyticsEvent("same").set_priority(1).put_attribute("x", 1).fingerprint()


class TestCommonEvents:
    """Test cases for the predefined event types."""

    def test_content_view(self):
        event = ContentViewEvent("Home Screen")

        assert event.name == CommonEvents.CONTENT_VIEW
        assert event.get_attribute(ContentViewEvent.CONTENT_NAME) == "Home Screen"

    def test_error_event_defaults(self):
        event = ErrorEvent()

        assert event.name == CommonEvents.ERROR
        assert event.message() is None
        assert event.exception() is None

    def test_error_event_fields(self):
        exc = ValueError("bad input")
        event = ErrorEvent("Checkout Error").set_message("card declined").set_exception(exc)

        assert event.name == "Checkout Error"
        assert event.message() == "card declined"
        assert event.exception() is exc
        assert event.attributes == {"error_message": "card declined", "exception_object": exc}
