import math

import pytest

from cargotrack.geo.coordinates import (
    Coordinate,
    coordinate_from_mapping,
    coordinate_from_pair,
    coordinate_to_pair,
    is_valid_coordinate,
)


@pytest.mark.parametrize(
    "value",
    [
        {"lat": 0, "lng": 0},
        {"lat": -90, "lng": -180},
        {"lat": 90, "lng": 180},
        {"lat": 51.5074, "lng": -0.1278},
        Coordinate(lat=1.3521, lng=103.8198),
    ],
)
def test_valid_coordinates(value):
    assert is_valid_coordinate(value)


@pytest.mark.parametrize(
    "value",
    [
        None,
        "51.5,-0.12",
        [51.5, -0.12],
        {"lat": 91, "lng": 0},
        {"lat": 0, "lng": 181},
        {"lat": "51.5", "lng": "-0.12"},
        {"lat": True, "lng": 0},
        {"lat": math.nan, "lng": 0},
        {"lat": 0},
        Coordinate(lat=-95.0, lng=0.0),
    ],
)
def test_invalid_coordinates(value):
    assert not is_valid_coordinate(value)


def test_pair_conversions_are_explicit():
    coord = coordinate_from_pair([48.8566, 2.3522])
    assert coord == Coordinate(lat=48.8566, lng=2.3522)
    assert coordinate_to_pair(coord) == [48.8566, 2.3522]
    assert coordinate_to_pair({"lat": 10, "lng": 20}) == [10.0, 20.0]
    assert coordinate_from_pair([48.8566]) is None
    assert coordinate_from_pair(["48.8", 2.3]) is None
    assert coordinate_from_pair([200, 0]) is None
    assert coordinate_to_pair({"lat": 100, "lng": 0}) is None


def test_mapping_conversion_and_immutability():
    coord = coordinate_from_mapping({"lat": 35, "lng": 139})
    assert coord.as_dict() == {"lat": 35.0, "lng": 139.0}
    with pytest.raises(AttributeError):
        coord.lat = 0  # type: ignore[misc]
