"""
Harmony Module - Scales, Pitches and the Musical Configuration of a Chart

This module turns a chart and a genre into the musical frame every generator
works inside:
    1. Count sign elements to find the chart's dominant element
    2. Pick that element's 7-note modal scale (genre overrides allowed)
    3. Resolve the genre's instrument families
    4. Merge each planet's mapping with its genre variation

It also owns pitch arithmetic: note names to Hz in 12-tone equal temperament
with an A440 reference.
"""

from collections import Counter
from typing import List, Optional

from pydantic import BaseModel, Field

from astrosonic.data.schema import AspectRelation, Chart
from astrosonic.data.tables import (
    GenreVariation,
    InstrumentFamilies,
    MappingTables,
    PlanetaryMapping,
    get_planet_mapping,
    get_tables,
    resolve_genre,
)
from astrosonic.rules.aspects import calculate_aspects


# =============================================================================
# CONSTANTS: Pitch
# =============================================================================

# The 12 notes in Western music, using sharps
CHROMATIC_SCALE = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Flat spellings used by the modal scales, mapped to their sharp equivalents
FLAT_TO_SHARP = {
    "Db": "C#",
    "Eb": "D#",
    "Gb": "F#",
    "Ab": "G#",
    "Bb": "A#",
}

# Octave-4 frequencies, A4 = 440 Hz
NOTE_FREQUENCIES = {
    "C": 261.63, "C#": 277.18, "D": 293.66, "D#": 311.13,
    "E": 329.63, "F": 349.23, "F#": 369.99, "G": 392.00,
    "G#": 415.30, "A": 440.00, "A#": 466.16, "B": 493.88,
}

REFERENCE_OCTAVE = 4

FALLBACK_ELEMENT = "Fire"


# =============================================================================
# PITCH FUNCTIONS
# =============================================================================

def normalize_note(note: str) -> str:
    """Convert a note name to its standard sharp form."""
    if len(note) == 1:
        note = note.upper()
    elif len(note) == 2:
        note = note[0].upper() + note[1].lower()
    else:
        raise ValueError(f"Invalid note format: '{note}'")

    if note in FLAT_TO_SHARP:
        note = FLAT_TO_SHARP[note]

    if note not in CHROMATIC_SCALE:
        raise ValueError(f"Unknown note: '{note}'. Valid notes are: {CHROMATIC_SCALE}")

    return note


def note_frequency(note: str, octave: int = REFERENCE_OCTAVE) -> float:
    """
    Frequency of a note name in a given octave.

    Examples:
        >>> note_frequency("A", 4)
        440.0
        >>> note_frequency("Eb", 5)   # same pitch as D#5
        622.26
    """
    return NOTE_FREQUENCIES[normalize_note(note)] * 2 ** (octave - REFERENCE_OCTAVE)


# =============================================================================
# CONFIGURATION MODELS
# =============================================================================

class ResolvedPlanet(BaseModel):
    """A planet's mapping merged with its genre variation."""

    name: str
    mapping: PlanetaryMapping
    genre_config: Optional[GenreVariation] = None


class MusicalConfig(BaseModel):
    genre: str
    dominant_element: str
    scale: List[str]
    aspects: List[AspectRelation] = Field(default_factory=list)
    instruments: InstrumentFamilies
    planets: List[ResolvedPlanet] = Field(default_factory=list)


# =============================================================================
# RESOLUTION
# =============================================================================

def dominant_element(chart: Chart, tables: Optional[MappingTables] = None) -> str:
    """
    Most frequent sign element among the chart's planets.

    Ties are broken by the fixed element priority (Fire, Earth, Air, Water)
    rather than by dictionary order. An empty chart falls back to Fire.
    """
    tables = tables or get_tables()
    counts = Counter(position.sign.element for position in chart.planets.values())
    if not counts:
        return FALLBACK_ELEMENT

    best = max(counts.values())
    for element in tables.element_priority:
        if counts.get(element, 0) == best:
            return element
    return FALLBACK_ELEMENT


def get_scale(element: str, genre: str, tables: Optional[MappingTables] = None) -> List[str]:
    """Scale for an element, using a genre-specific override when one exists."""
    tables = tables or get_tables()
    by_genre = tables.element_scales.get(element) or tables.element_scales[FALLBACK_ELEMENT]
    return list(by_genre.get(genre) or by_genre["default"])


def get_instruments(genre: str, tables: Optional[MappingTables] = None) -> InstrumentFamilies:
    tables = tables or get_tables()
    return tables.genre_instruments.get(genre) or tables.genre_instruments[tables.default_genre]


def get_genre_variation(
    mapping: PlanetaryMapping,
    genre: str,
    tables: Optional[MappingTables] = None
) -> Optional[GenreVariation]:
    tables = tables or get_tables()
    return (
        mapping.genre_variations.get(genre)
        or mapping.genre_variations.get(tables.default_genre)
    )


def get_musical_config(
    chart: Chart,
    genre: Optional[str] = "electronic",
    tables: Optional[MappingTables] = None
) -> MusicalConfig:
    """
    Resolve the musical frame for a chart and genre.

    Args:
        chart: Validated chart
        genre: Genre name; unknown genres fall back to the default genre
        tables: Mapping tables (defaults to the packaged ones)

    Returns:
        MusicalConfig bundling aspects, scale, instruments and merged planets
    """
    tables = tables or get_tables()
    genre = resolve_genre(genre, tables)
    element = dominant_element(chart, tables)

    planets = []
    for name in chart.planets:
        mapping = get_planet_mapping(name, tables)
        if mapping is None:
            continue
        planets.append(ResolvedPlanet(
            name=name,
            mapping=mapping,
            genre_config=get_genre_variation(mapping, genre, tables),
        ))

    return MusicalConfig(
        genre=genre,
        dominant_element=element,
        scale=get_scale(element, genre, tables),
        aspects=calculate_aspects(chart, tables),
        instruments=get_instruments(genre, tables),
        planets=planets,
    )
