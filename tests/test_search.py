"""Tests for the paired-date and options search flows."""

import asyncio
import json
from datetime import date

import pytest

from award_pairs.budget import CARD_MULTIPLIER
from award_pairs.cache import SummaryCache
from award_pairs.errors import InvalidRequest, ProviderError
from award_pairs.narrative import FALLBACK_SUMMARY, NarrativeGenerator
from award_pairs.resolver import DestinationResolver
from award_pairs.search import (
    OptionsRequest,
    cabin_code,
    engine_cabin,
    find_date_pair_cards,
    find_reachable_options,
    month_to_date_range,
    resolve_origin,
)
from tests.fakes import FakeProvider, fake_openai
from tests.mock_data import make_record, make_trip

FEB_START = date(2026, 2, 1)
FEB_END = date(2026, 2, 28)


@pytest.fixture(autouse=True)
def half_rate_card(monkeypatch):
    """A card that converts at exactly 0.5 keeps the arithmetic exact."""
    monkeypatch.setitem(CARD_MULTIPLIER, "Test Half Rate Card", 0.5)


def _pair_provider(**kwargs):
    outbound = [
        make_record("2026-02-03", economy=22500, record_id="out-03"),
        make_record("2026-02-10", economy=25000, record_id="out-10"),
    ]
    returns = [
        make_record("2026-02-08", economy=22500, origin="BKK", destination="BLR", record_id="ret-08"),
        make_record("2026-02-13", economy=22500, origin="BKK", destination="BLR", record_id="ret-13"),
    ]
    trips = {
        "out-03": [make_trip(miles=22500, flight_numbers="TG 326")],
        "out-10": [make_trip(miles=25000, flight_numbers="TG 328")],
        "ret-08": [make_trip(miles=22500, flight_numbers="TG 325", origin="BKK", destination="BLR")],
        "ret-13": [make_trip(miles=22500, flight_numbers="TG 327", origin="BKK", destination="BLR")],
    }
    return FakeProvider({("BLR", "BKK"): outbound, ("BKK", "BLR"): returns}, trips, **kwargs)


class TestMonthToDateRange:
    @pytest.mark.parametrize("text", ["2026-02", "2026-02-17", "February 2026", "Feb 2026", "February, 2026"])
    def test_formats(self, text):
        assert month_to_date_range(text) == (FEB_START, FEB_END)

    def test_leap_year(self):
        assert month_to_date_range("2028-02")[1] == date(2028, 2, 29)

    @pytest.mark.parametrize("text", [None, "", "someday"])
    def test_invalid(self, text):
        with pytest.raises(InvalidRequest):
            month_to_date_range(text)


def test_cabin_helpers():
    assert cabin_code("Business") == "J"
    assert cabin_code("Premium Economy") == "W"
    assert engine_cabin("J") == "business"
    assert engine_cabin("W") == "economy"
    assert engine_cabin("F") == "economy"
    with pytest.raises(InvalidRequest) as exc_info:
        cabin_code("Suite")
    assert exc_info.value.status == 400
    assert resolve_origin("Delhi") == "DEL"
    assert resolve_origin("BLR") == "BLR"


class TestFindDatePairCards:
    def test_cards_with_itineraries(self):
        provider = _pair_provider()
        result = asyncio.run(find_date_pair_cards(
            provider, "blr", "bkk", FEB_START, FEB_END, min_nights=3, max_nights=10,
        ))

        assert result.message is None
        assert [(c.depart_date.day, c.return_date.day, c.nights) for c in result.cards] == [
            (10, 13, 3), (3, 8, 5), (3, 13, 10),
        ]
        first = result.cards[0]
        assert first.outbound_summary.flight_numbers == "TG 328"
        assert first.return_summary.flight_numbers == "TG 327"
        assert first.total_points == 47500

        assert {(s["origin"], s["destination"]) for s in provider.searches} == {("BLR", "BKK"), ("BKK", "BLR")}
        assert all(s["take"] == 100 for s in provider.searches)

    def test_leg_without_itinerary(self):
        provider = _pair_provider()
        provider.trips["out-10"] = [make_trip(cabin="business", miles=60000)]
        result = asyncio.run(find_date_pair_cards(provider, "BLR", "BKK", FEB_START, FEB_END, 3, 3))

        (card,) = result.cards
        assert card.outbound_summary is None
        assert card.total_points == 22500

    def test_no_outbound_message(self):
        provider = _pair_provider()
        result = asyncio.run(find_date_pair_cards(
            provider, "BLR", "BKK", FEB_START, FEB_END, budget_miles=20000,
        ))
        assert result.cards == []
        assert result.message == "No outbound availability found for BLR → BKK in this date range"
        assert provider.trip_requests == []

    def test_no_pairs_message(self):
        result = asyncio.run(find_date_pair_cards(
            _pair_provider(), "BLR", "BKK", FEB_START, FEB_END, min_nights=20, max_nights=25,
        ))
        assert result.message == "No date pairs found for 20–25 nights in this month"

    def test_missing_params_rejected_before_fetch(self):
        provider = _pair_provider()
        with pytest.raises(InvalidRequest) as exc_info:
            asyncio.run(find_date_pair_cards(provider, "BLR", "", FEB_START, FEB_END))
        assert exc_info.value.message == "Missing required query params"
        assert provider.searches == []

    @pytest.mark.parametrize("cabin", ["first", "premium", ""])
    def test_unknown_cabin_rejected_before_fetch(self, cabin):
        provider = _pair_provider()
        with pytest.raises(InvalidRequest) as exc_info:
            asyncio.run(find_date_pair_cards(provider, "BLR", "BKK", FEB_START, FEB_END, cabin_pref=cabin))
        assert exc_info.value.message == "Invalid cabin"
        assert exc_info.value.status == 400
        assert provider.searches == []

    def test_cabin_label_case_insensitive(self):
        result = asyncio.run(find_date_pair_cards(
            _pair_provider(), "BLR", "BKK", FEB_START, FEB_END, cabin_pref="Economy",
        ))
        assert len(result.cards) == 3

    def test_provider_error_propagates(self):
        provider = _pair_provider(error=ProviderError("Seats Cached Search failed", status=429, detail="slow down"))
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(find_date_pair_cards(provider, "BLR", "BKK", FEB_START, FEB_END))
        assert exc_info.value.status == 429
        assert exc_info.value.detail == "slow down"


def _options_provider():
    records = [
        make_record("2026-02-03", economy=22500, destination="BKK", stops=1),
        make_record("2026-02-04", economy=22500, destination="BKK", stops=1),
        make_record("2026-02-05", economy=30000, destination="BKK", stops=0),
        make_record("2026-02-06", economy=15000, destination="SIN", source="singapore", stops=0),
        make_record("2026-02-07", economy=90000, destination="KUL"),
        make_record("2026-02-08", business=40000, destination="KUL"),
    ]
    return FakeProvider({("DEL", "BKK,SIN,KUL"): records})


def _request(**overrides):
    fields = dict(
        points=100000,
        origin="Delhi",
        destination="Southeast Asia",
        travel_month="2026-02",
        cabin="Economy",
        card_name="Test Half Rate Card",
        trip_duration=4,
    )
    fields.update(overrides)
    return OptionsRequest(**fields)


RESOLUTION = json.dumps({
    "airports": [
        {"iata": "BKK", "city": "Bangkok", "country": "Thailand", "distanceKm": 0},
        {"iata": "SIN", "city": "Singapore", "country": "Singapore", "distanceKm": 0},
        {"iata": "KUL", "city": "Kuala Lumpur", "country": "Malaysia", "distanceKm": 0},
    ],
    "input_type": "region",
    "confidence": "high",
    "notes": "",
})


class TestFindReachableOptions:
    def test_options_flow(self):
        provider = _options_provider()
        resolver = DestinationResolver(fake_openai(RESOLUTION))
        narrator = NarrativeGenerator(fake_openai(json.dumps({"bullets": ["Day one", "Day two"]})), SummaryCache())

        result = asyncio.run(find_reachable_options(provider, _request(), resolver, narrator))

        # Converts at 0.5 -> 50,000 partner miles
        assert result.multiplier == 0.5
        assert result.partner_miles == 50000
        assert result.origin_airport == "DEL"
        assert result.destination_airport == "BKK,SIN,KUL"
        assert result.cabin_code == "Y"
        assert (result.start_date, result.end_date) == (FEB_START, FEB_END)
        assert provider.searches[0]["take"] == 500

        summary = [(o.destination, o.points_required, o.stops) for o in result.options]
        # KUL economy is over budget and KUL business is the wrong cabin
        assert summary == [
            ("SIN", 30000, 0),
            ("BKK", 45000, 1),
            ("BKK", 60000, 0),
        ]
        sin = result.options[0]
        assert sin.disclaimer is not None
        assert sin.destination_name == "Singapore"
        assert all(o.trip_summary == ["Day one", "Day two"] for o in result.options)

    def test_without_llm(self):
        provider = FakeProvider({("DEL", "BKK"): [make_record("2026-02-03", economy=22500)]})
        result = asyncio.run(find_reachable_options(
            provider, _request(destination="BKK"), DestinationResolver(None), NarrativeGenerator(None),
        ))
        assert result.destination_airport == "BKK"
        (option,) = result.options
        assert option.trip_summary == FALLBACK_SUMMARY

    def test_unknown_card_reaches_nothing(self):
        result = asyncio.run(find_reachable_options(
            _options_provider(),
            _request(card_name="Mystery Card"),
            DestinationResolver(fake_openai(RESOLUTION)),
            NarrativeGenerator(None),
        ))
        assert result.partner_miles == 0
        assert result.options == []

    def test_business_request(self):
        result = asyncio.run(find_reachable_options(
            _options_provider(),
            _request(cabin="Business"),
            DestinationResolver(fake_openai(RESOLUTION)),
            NarrativeGenerator(None),
        ))
        assert result.cabin_code == "J"
        assert [(o.destination, o.cabin) for o in result.options] == [("KUL", "Business")]

    @pytest.mark.parametrize("overrides, message", [
        ({"points": None}, "Missing required fields"),
        ({"card_name": ""}, "Missing required fields"),
        ({"points": "many"}, "Invalid points: must be a number"),
        ({"points": float("nan")}, "Invalid points: must be a non-negative number"),
        ({"points": -5}, "Invalid points: must be a non-negative number"),
        ({"cabin": "Suite"}, "Invalid cabin"),
        ({"travel_month": "whenever"}, "Invalid travelMonth format"),
    ])
    def test_invalid_requests_never_hit_provider(self, overrides, message):
        provider = _options_provider()
        with pytest.raises(InvalidRequest) as exc_info:
            asyncio.run(find_reachable_options(
                provider, _request(**overrides), DestinationResolver(None), NarrativeGenerator(None),
            ))
        assert exc_info.value.message == message
        assert provider.searches == []
