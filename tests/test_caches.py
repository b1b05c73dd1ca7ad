"""
Tests for the process-local caches: the weather forecast TTL cache and
the one-shot temporary PDF store.
"""

import pytest
from unittest.mock import patch
from boohk.background_jobs import sweep_temp_pdfs_job
from boohk.services import weather
from boohk.services.temp_pdf import TempPDFStore, temp_pdf_filename, MAX_AGE_SECONDS
from boohk.services.weather import TTLCache


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestTTLCache:
    """Tests for the keyed TTL cache."""

    def test_fresh_entry_returned(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("264885", {"temp": 31})
        clock.advance(59)
        assert cache.get("264885") == {"temp": 31}

    def test_stale_entry_is_miss(self):
        clock = FakeClock()
        cache = TTLCache(60, clock=clock)
        cache.set("264885", {"temp": 31})
        clock.advance(60)
        assert cache.get("264885") is None

    def test_last_write_wins(self):
        cache = TTLCache(60, clock=FakeClock())
        cache.set("k", 1)
        cache.set("k", 2)
        assert cache.get("k") == 2

    def test_clear(self):
        cache = TTLCache(60, clock=FakeClock())
        cache.set("k", 1)
        cache.clear()
        assert cache.get("k") is None


class TestGetForecast:
    """Tests for cached forecast lookups."""

    def test_invalid_location(self):
        with pytest.raises(ValueError, match="Invalid location key"):
            weather.get_forecast("000000", cache=TTLCache(60))

    def test_second_call_served_from_cache(self):
        cache = TTLCache(60, clock=FakeClock())
        with patch.object(weather, "fetch_forecast", return_value={"location": "Manila"}) as fetch:
            first = weather.get_forecast("264885", cache=cache)
            second = weather.get_forecast("264885", cache=cache)

        assert first == second == {"location": "Manila"}
        assert fetch.call_count == 1

    def test_failures_not_cached(self):
        cache = TTLCache(60, clock=FakeClock())
        with patch.object(weather, "fetch_forecast", side_effect=weather.WeatherServiceError("boom")):
            with pytest.raises(weather.WeatherServiceError):
                weather.get_forecast("264885", cache=cache)
        assert cache.get("264885") is None


class TestTempPDFStore:
    """Tests for one-time PDF downloads."""

    def test_put_returns_handle(self):
        store = TempPDFStore(clock=FakeClock())
        handle = store.put("abc123", "Q3 Campaign: EDSA", b"%PDF-1.4 data")

        assert handle["tempId"].startswith("temp_")
        assert handle["filename"] == "OH_PROP_abc123_Q3_Campaign_EDSA.pdf"
        assert handle["size"] == len(b"%PDF-1.4 data")
        assert handle["compressed"] is False

    def test_take_is_one_time(self):
        store = TempPDFStore(clock=FakeClock())
        handle = store.put("abc123", "Proposal", b"pdf")

        entry = store.take(handle["tempId"])
        assert entry["data"] == b"pdf"
        assert store.take(handle["tempId"]) is None

    def test_expired_entry_is_missing(self):
        clock = FakeClock()
        store = TempPDFStore(clock=clock)
        handle = store.put("abc123", "Proposal", b"pdf")
        clock.advance(MAX_AGE_SECONDS + 1)
        assert store.take(handle["tempId"]) is None

    def test_sweep_removes_only_expired(self):
        clock = FakeClock()
        store = TempPDFStore(clock=clock)
        store.put("old", "Old", b"1")
        clock.advance(MAX_AGE_SECONDS + 1)
        fresh = store.put("new", "New", b"2")

        assert sweep_temp_pdfs_job(store) == 1
        assert len(store) == 1
        assert store.take(fresh["tempId"])["data"] == b"2"

    def test_filename_fallback_for_blank_title(self):
        assert temp_pdf_filename("abc", "!!!") == "OH_PROP_abc_proposal.pdf"
