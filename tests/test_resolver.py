"""Tests for free-text destination resolution."""

import asyncio
import json

from award_pairs.resolver import DestinationResolver, fallback_resolution
from tests.fakes import fake_openai

SOUTHEAST_ASIA = {
    "airports": [
        {"iata": "bkk", "city": "Bangkok", "country": "Thailand", "distanceKm": 0},
        {"iata": "SIN", "city": "Singapore", "country": "Singapore", "distanceKm": 0},
        {"iata": "KUL", "city": "Kuala Lumpur", "country": "Malaysia", "distanceKm": 0},
        {"iata": "SGN", "city": None, "country": "Vietnam", "distanceKm": 0},
        {"iata": "CGK", "city": "Jakarta", "country": "Indonesia", "distanceKm": 0},
        {"iata": "MNL", "city": "Manila", "country": "Philippines", "distanceKm": 0},
    ],
    "input_type": "region",
    "confidence": "high",
    "notes": "",
}


def test_fallback_resolution():
    res = fallback_resolution(" BKK ")
    assert res.codes == ["BKK"]
    assert res.confidence == "low"
    assert res.input_type == "unknown"
    assert "passed through" in res.notes


def test_no_client_passes_through():
    res = asyncio.run(DestinationResolver(None).resolve("Bangkok"))
    assert res.codes == ["Bangkok"]


def test_region_resolves_to_at_most_five():
    client = fake_openai(json.dumps(SOUTHEAST_ASIA))
    res = asyncio.run(DestinationResolver(client).resolve("Southeast Asia"))

    assert res.codes == ["BKK", "SIN", "KUL", "SGN", "CGK"]
    assert res.input_type == "region"
    assert res.city_names()["BKK"] == "Bangkok"
    assert res.city_names()["SGN"] == "SGN"

    call = client.chat.completions.calls[0]
    assert call["response_format"]["type"] == "json_schema"
    assert 'Destination: "Southeast Asia"' in call["messages"][0]["content"]


def test_client_error_falls_back():
    client = fake_openai(RuntimeError("timeout"))
    res = asyncio.run(DestinationResolver(client).resolve("Japan"))
    assert res.codes == ["Japan"]
    assert res.confidence == "low"


def test_unusable_reply_falls_back():
    for reply in ("", "not json", json.dumps({"airports": []}), json.dumps({"airports": [{"iata": ""}]})):
        res = asyncio.run(DestinationResolver(fake_openai(reply)).resolve("Maldives"))
        assert res.codes == ["Maldives"], reply


def test_empty_input_skips_model():
    client = fake_openai(json.dumps(SOUTHEAST_ASIA))
    res = asyncio.run(DestinationResolver(client).resolve("   "))
    assert res.codes == [""]
    assert client.chat.completions.calls == []
