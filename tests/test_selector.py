"""Tests for per-leg itinerary selection."""

from award_pairs.selector import best_trip_summary, extract_trip_summary, select_best_trip
from tests.mock_data import SEATS_TRIPS_RESPONSE, make_trip


def test_fewest_stops_wins():
    trips = SEATS_TRIPS_RESPONSE["data"]
    best = select_best_trip(trips, "economy")
    assert best["FlightNumbers"] == "TG 326"


def test_duration_breaks_stop_ties():
    trips = [
        make_trip(stops=1, duration=600, flight_numbers="AI 1"),
        make_trip(stops=1, duration=480, flight_numbers="AI 2"),
        make_trip(stops=2, duration=300, flight_numbers="AI 3"),
    ]
    assert select_best_trip(trips, "economy")["FlightNumbers"] == "AI 2"


def test_full_tie_keeps_input_order():
    trips = [
        make_trip(stops=0, duration=300, flight_numbers="TG 1"),
        make_trip(stops=0, duration=300, flight_numbers="TG 2"),
    ]
    assert select_best_trip(trips, "economy")["FlightNumbers"] == "TG 1"


def test_missing_stops_and_duration_sort_last():
    trips = [
        make_trip(stops=None, duration=100, flight_numbers="XX 1"),
        make_trip(stops=3, duration=None, flight_numbers="XX 2"),
        make_trip(stops=3, duration=900, flight_numbers="XX 3"),
    ]
    assert select_best_trip(trips, "economy")["FlightNumbers"] == "XX 3"


def test_cabin_match_is_case_insensitive():
    trips = [make_trip(cabin="Business", flight_numbers="TG 330")]
    assert select_best_trip(trips, "business")["FlightNumbers"] == "TG 330"


def test_no_candidate_in_cabin():
    trips = [make_trip(cabin="business")]
    assert select_best_trip(trips, "economy") is None
    assert select_best_trip([], "economy") is None
    assert best_trip_summary(trips, "economy") is None


def test_extract_trip_summary():
    summary = extract_trip_summary(make_trip(
        cabin="economy", stops=0, duration=285, miles=22500, flight_numbers="TG 326",
    ))
    assert summary.origin == "BLR"
    assert summary.destination == "BKK"
    assert summary.departs_at == "2026-02-03T09:15:00Z"
    assert summary.stops == 0
    assert summary.carriers == "TG"
    assert summary.aircraft == "Airbus A350"
    assert summary.remaining_seats == 4
    assert summary.mileage_cost == 22500
    assert summary.program_name == "United MileagePlus"
    assert summary.format_duration() == "4h45m"


def test_extract_trip_summary_tolerates_sparse_trip():
    summary = extract_trip_summary({"Cabin": "economy", "Aircraft": [], "MileageCost": "lots"})
    assert summary.aircraft == ""
    assert summary.stops is None
    assert summary.mileage_cost is None
    assert summary.format_duration() == "–"
    assert extract_trip_summary(None) is None
