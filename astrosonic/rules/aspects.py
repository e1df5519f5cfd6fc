"""
Aspect Module - Angular Relationships Between Planets

For every unordered pair of planets in a chart this module measures the
difference of their ecliptic longitudes and classifies it into one of five
aspects using fixed orb windows:

    conjunction   0-8   or 352-360
    sextile       58-62 or 298-302
    square        85-95 or 265-275
    trine        118-122 or 238-242
    opposition   172-188

The windows are checked in that order and the first match wins, so each pair
produces at most one relation. Pairs outside every window produce nothing.
"""

from itertools import combinations
from typing import List, Optional

from astrosonic.data.schema import AspectRelation, Chart, PlanetPosition
from astrosonic.data.tables import MappingTables, get_tables, sign_index


# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def absolute_longitude(
    position: PlanetPosition,
    tables: Optional[MappingTables] = None
) -> float:
    """Ecliptic longitude rebuilt from sign and degree: degree + (sign-1)*30."""
    return position.sign.degree + (sign_index(position.sign.name, tables) - 1) * 30


def classify_angle(angle: float, tables: Optional[MappingTables] = None) -> Optional[str]:
    """Return the first aspect whose orb window contains ``angle``, or None."""
    tables = tables or get_tables()
    for aspect_type, spec in tables.aspects.items():
        if spec.matches(angle):
            return aspect_type
    return None


def calculate_aspects(chart: Chart, tables: Optional[MappingTables] = None) -> List[AspectRelation]:
    """
    Calculate every aspect in a chart.

    Pairs are enumerated in the chart's declaration order (outer loop over
    planets, inner loop over the planets after it), and the result keeps that
    order. The function is pure: the same chart always yields the same list.

    Args:
        chart: Validated chart
        tables: Mapping tables (defaults to the packaged ones)

    Returns:
        List of AspectRelation, possibly empty

    Example:
        Sun at 0 Aries and Moon at 0 Libra are 180 degrees apart:
        [AspectRelation(planet1='Sun', planet2='Moon', type='opposition',
                        angle=180.0, harmonic='octave')]
    """
    tables = tables or get_tables()
    aspects = []

    for (name1, pos1), (name2, pos2) in combinations(chart.planets.items(), 2):
        angle = abs(absolute_longitude(pos1, tables) - absolute_longitude(pos2, tables))
        aspect_type = classify_angle(angle, tables)
        if aspect_type is None:
            continue

        aspects.append(AspectRelation(
            planet1=name1,
            planet2=name2,
            type=aspect_type,
            angle=angle,
            harmonic=tables.aspects[aspect_type].harmonic,
        ))

    return aspects


def aspect_strength(aspect: AspectRelation, strength_range: float = 10.0) -> float:
    """
    Closeness heuristic used to weight sandbox aspect notes.

    Centered on 0 degrees, so only conjunction-like angles score above zero;
    wider aspects (sextile, square, trine, opposition) always score 0.
    """
    return max(0.0, 1 - abs(aspect.angle - 0) / strength_range)


def harmonic_interval(
    base_frequency: float,
    aspect_type: str,
    tables: Optional[MappingTables] = None
) -> float:
    """Shift a frequency by the aspect's semitone interval; unknown types pass through."""
    tables = tables or get_tables()
    spec = tables.aspects.get(aspect_type)
    if spec is None:
        return base_frequency
    return base_frequency * 2 ** (spec.interval / 12)
