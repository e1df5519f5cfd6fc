"""Shared chart builders for the test suite."""

import pytest

from astrosonic.data.schema import Chart, ChartMetadata, PlanetPosition, SignInfo


SIGNS = {
    "Aries": ("Fire", "Cardinal"),
    "Taurus": ("Earth", "Fixed"),
    "Gemini": ("Air", "Mutable"),
    "Cancer": ("Water", "Cardinal"),
    "Leo": ("Fire", "Fixed"),
    "Virgo": ("Earth", "Mutable"),
    "Libra": ("Air", "Cardinal"),
    "Scorpio": ("Water", "Fixed"),
    "Sagittarius": ("Fire", "Mutable"),
    "Capricorn": ("Earth", "Cardinal"),
    "Aquarius": ("Air", "Fixed"),
    "Pisces": ("Water", "Mutable"),
}
SIGN_ORDER = list(SIGNS)


def position(sign: str, degree: float = 0.0, house: int = 1) -> PlanetPosition:
    """Planet position whose longitude agrees with its sign and degree."""
    element, modality = SIGNS[sign]
    return PlanetPosition(
        longitude=SIGN_ORDER.index(sign) * 30 + degree,
        sign=SignInfo(name=sign, element=element, modality=modality, degree=degree),
        house=house,
    )


def make_chart(**planets: PlanetPosition) -> Chart:
    return Chart(
        metadata=ChartMetadata(birth_datetime="1990-04-01T12:00:00Z"),
        planets=planets,
    )


@pytest.fixture
def sun_moon_opposition() -> Chart:
    return make_chart(Sun=position("Aries", 0, 1), Moon=position("Libra", 0, 7))


@pytest.fixture
def full_chart() -> Chart:
    return make_chart(
        Sun=position("Aries", 11.0, 1),
        Moon=position("Libra", 11.0, 7),
        Mercury=position("Aries", 25.0, 1),
        Venus=position("Taurus", 3.0, 2),
        Mars=position("Leo", 11.0, 5),
        Jupiter=position("Cancer", 14.0, 4),
        Saturn=position("Capricorn", 24.0, 10),
        Uranus=position("Capricorn", 9.0, 10),
        Neptune=position("Capricorn", 14.0, 10),
        Pluto=position("Scorpio", 17.0, 8),
    )


@pytest.fixture
def chart_payload() -> dict:
    return {
        "metadata": {"birth_datetime": "1990-04-01T12:00:00Z", "coordinate_system": "Tropical"},
        "planets": {
            "Sun": {
                "longitude": 0.0,
                "sign": {"name": "aries", "element": "fire", "modality": "cardinal", "degree": 0.0},
                "house": 1,
            },
            "Moon": {
                "longitude": 180.0,
                "sign": {"name": "Libra", "element": "Air", "modality": "Cardinal", "degree": 0.0},
                "house": 7,
            },
        },
        "houses": {
            "1": {
                "cusp_longitude": 0.0,
                "sign": {"name": "Aries", "element": "Fire", "modality": "Cardinal", "degree": 0.0},
            },
        },
    }
