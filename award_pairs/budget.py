"""Card points <-> partner miles conversion."""

import math

# Points-to-miles transfer ratio per card display name.
# Cards not listed convert at 0, so they can never afford anything.
CARD_MULTIPLIER = {
    "Burgundy Private Credit Card": 0.8,
    "Magnus for Burgundy Credit Card": 0.8,
    "Magnus Credit Card (Standard)": 0.4,
    "Reserve Credit Card": 0.4,
    "Select Credit Card": 0.1,
    "Privilege Credit Card": 0.1,
    "Axis Bank Rewards Credit Card": 0.1,
    "Privilege Easy Credit Card": 0.05,
    "Axis Bank IndianOil Credit Card (regular)": 0.05,
    "IndianOil Easy Axis Bank Credit Card": 0.05,
    "Axis Bank My Zone Credit Card": 0.05,
    "Axis Bank My Zone Easy Credit Card": 0.05,
    "Axis Bank Signature Credit Card": 0.05,
    "Axis Bank Titanium Smart Traveller Credit Card": 0.05,
    "Axis Bank Pride Platinum Credit Card": 0.05,
    "Axis Bank Pride Signature Credit Card": 0.05,
}


def card_multiplier(card_name: str) -> float:
    """Return the transfer multiplier for a card, 0.0 if the card is unknown."""
    return CARD_MULTIPLIER.get(card_name, 0.0)


def miles_from_points(points: float, multiplier: float) -> int:
    return math.floor(points * multiplier)


def points_from_miles(miles: float, multiplier: float) -> float:
    """Points needed to cover *miles*; miles pass through unchanged when multiplier is 0."""
    if multiplier > 0:
        return math.ceil(miles / multiplier)
    return miles
