"""Tests for courtside.core.defaults and courtside.core.preferences."""

from datetime import date

from courtside.core.defaults import all_day_defaults, default_status, time_slots
from courtside.core.preferences import (
    ViewPreferences,
    filter_occurrences,
    with_event_types,
    with_team,
)
from courtside.data.models import AvailabilityStatus, Event, Match, PersonalActivity

# 2025-06-02 is a Monday
MONDAY_MATCH = Match(id="m", date=date(2025, 6, 2), time="19:00")


class TestTimeSlots:
    def test_half_hour_slots(self):
        assert time_slots(18, 20) == ["18:00", "18:30", "19:00", "19:30", "20:00"]

    def test_all_day_defaults(self):
        defaults = all_day_defaults()
        assert len(defaults) == 7
        assert defaults["Sunday"][0] == "06:00"
        assert defaults["Sunday"][-1] == "22:00"


class TestDefaultStatus:
    def test_no_defaults_means_available(self):
        assert default_status(MONDAY_MATCH, None) is AvailabilityStatus.AVAILABLE
        assert default_status(MONDAY_MATCH, {}) is AvailabilityStatus.AVAILABLE

    def test_slot_listed_for_weekday(self):
        defaults = {"Monday": ["18:30", "19:00"]}
        assert default_status(MONDAY_MATCH, defaults) is AvailabilityStatus.AVAILABLE

    def test_slot_missing(self):
        defaults = {"Monday": ["07:00"], "Tuesday": ["19:00"]}
        assert default_status(MONDAY_MATCH, defaults) is AvailabilityStatus.UNAVAILABLE


class TestPreferences:
    OCCURRENCES = [
        MONDAY_MATCH,
        Event(id="p", date=date(2025, 6, 3), time="09:00", event_type="practice"),
        Event(id="s", date=date(2025, 6, 4), time="20:00", event_type="social"),
        Event(id="o", date=date(2025, 6, 5), time="20:00"),
        PersonalActivity(id="pa", date=date(2025, 6, 6), time="07:00"),
    ]

    def test_default_filter(self):
        kept = filter_occurrences(self.OCCURRENCES, ViewPreferences())
        assert [o.id for o in kept] == ["m", "p", "o", "pa"]

    def test_only_matches_without_personal(self):
        prefs = ViewPreferences(event_types=frozenset({"match"}), include_personal=False)
        assert [o.id for o in filter_occurrences(self.OCCURRENCES, prefs)] == ["m"]

    def test_updates_return_new_objects(self):
        prefs = ViewPreferences()
        switched = with_team(prefs, "t9")
        narrowed = with_event_types(switched, {"Social"})
        assert prefs.team_id is None
        assert switched.team_id == "t9"
        assert narrowed.event_types == frozenset({"social"})
        assert [o.id for o in filter_occurrences(self.OCCURRENCES, narrowed)] == ["s", "pa"]
