"""
Flat Composition Generator - One Note Per Planet

The simple path behind chart previews, daily transits and the sandbox:
planets are laid out one after another in house order, each getting an equal
slice of the requested duration and sounding for 80% of it.

    frequency = base * (1 + degree/30 * 0.5) * (1 + (house-1) * 0.1)
    volume    = min(0.8, 0.3 + energy * 0.4 + (house-1) * 0.05)

The sandbox variant appends one harmonic "aspect note" per aspect, and the
daily variant reads a list of transiting bodies instead of a natal chart.
"""

import logging
from typing import List, Optional

from astrosonic.data.schema import (
    AspectRelation,
    AudioComposition,
    AudioNote,
    Chart,
    SandboxConfiguration,
    TransitPlanet,
)
from astrosonic.data.tables import MappingTables, get_planet_mapping, get_tables
from astrosonic.rules.aspects import aspect_strength


logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 44100
DEFAULT_GENRE = "ambient"
DEFAULT_WAVEFORM = "sine"

NOTE_FILL = 0.8
BASE_VOLUME = 0.3
ENERGY_GAIN = 0.4
HOUSE_GAIN = 0.05
MAX_VOLUME = 0.8
BASELINE_TEMPO = 120.0


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def calculate_frequency(base_frequency: float, sign_degree: float, house: int) -> float:
    degree_multiplier = 1 + (sign_degree / 30) * 0.5
    house_multiplier = 1 + (house - 1) * 0.1
    return base_frequency * degree_multiplier * house_multiplier


def calculate_volume(energy: float, house: int) -> float:
    return min(MAX_VOLUME, BASE_VOLUME + energy * ENERGY_GAIN + (house - 1) * HOUSE_GAIN)


def genre_waveform(planet: str, genre: Optional[str], tables: Optional[MappingTables] = None) -> str:
    """
    Oscillator for a planet in a genre.

    Unknown genres use the ambient table; planets missing from the table
    play a sine.
    """
    tables = tables or get_tables()
    by_planet = (
        tables.genre_waveforms.get((genre or "").lower())
        or tables.genre_waveforms[tables.default_genre]
    )
    return by_planet.get(planet, DEFAULT_WAVEFORM)


def _composition(notes: List[AudioNote], duration: float, sample_rate: int) -> AudioComposition:
    """Keep the requested duration; total_duration also covers the last note end."""
    end = max((note.start_time + note.duration for note in notes), default=0.0)
    return AudioComposition(
        notes=notes,
        duration=duration,
        total_duration=max(duration, end),
        sample_rate=sample_rate,
    )


# =============================================================================
# CHART COMPOSITION
# =============================================================================

def planet_notes(
    chart: Chart,
    duration: float,
    genre: Optional[str],
    tables: Optional[MappingTables] = None
) -> List[AudioNote]:
    """
    Sequential, non-overlapping notes for every mapped planet.

    Planets without a mapping are skipped and do not take a time slot.
    """
    tables = tables or get_tables()
    mapped = [
        (name, position, get_planet_mapping(name, tables))
        for name, position in sorted(chart.planets.items(), key=lambda item: item[1].house)
    ]
    mapped = [entry for entry in mapped if entry[2] is not None]
    if not mapped or duration <= 0:
        return []

    slot = duration / len(mapped)
    notes = []
    current_time = 0.0
    for name, position, mapping in mapped:
        notes.append(AudioNote(
            frequency=calculate_frequency(mapping.base_frequency, position.sign.degree, position.house),
            duration=slot * NOTE_FILL,
            volume=calculate_volume(mapping.energy, position.house),
            instrument=genre_waveform(name, genre, tables),
            start_time=current_time,
        ))
        current_time += slot
    return notes


def generate_flat_composition(
    chart: Chart,
    duration: float = 60.0,
    genre: Optional[str] = DEFAULT_GENRE,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    tables: Optional[MappingTables] = None
) -> AudioComposition:
    """
    Whole-chart preview composition.

    Args:
        chart: Validated chart
        duration: Total length in seconds
        genre: Genre used to pick each planet's oscillator
        sample_rate: Sample rate recorded on the composition

    Returns:
        AudioComposition; empty (but well-formed) for an empty chart or
        zero duration

    Example:
        A chart holding only the Sun at 0 Aries in house 1, rendered for 12 s,
        yields one 264 Hz note starting at 0 and lasting 9.6 s.
    """
    duration = max(0.0, duration)
    notes = planet_notes(chart, duration, genre, tables)
    logger.debug("Flat composition: %d notes over %.1fs", len(notes), duration)
    return _composition(notes, duration, sample_rate)


# =============================================================================
# SANDBOX COMPOSITION
# =============================================================================

def generate_aspect_note(
    aspect: AspectRelation,
    genre: Optional[str],
    start_time: float,
    tables: Optional[MappingTables] = None
) -> Optional[AudioNote]:
    """
    Harmonic note for one aspect.

    The pitch blends the two planets' base frequencies (conjunction average,
    opposition the higher one x1.5, trine 0.75 x sum, square |difference|
    x1.2, anything else average). Loudness is the aspect energy times the
    0-degree-centered closeness strength times a per-type multiplier, clamped
    to 0.1-1.0.
    """
    tables = tables or get_tables()
    table = tables.aspect_notes
    harmonic = table.types.get(aspect.type)
    if harmonic is None:
        logger.warning("Unknown aspect type: %s", aspect.type)
        return None

    strength = aspect_strength(aspect, table.strength_range)

    mapping1 = get_planet_mapping(aspect.planet1, tables)
    mapping2 = get_planet_mapping(aspect.planet2, tables)
    fallback = tables.planets["Sun"].base_frequency
    freq1 = mapping1.base_frequency if mapping1 else fallback
    freq2 = mapping2.base_frequency if mapping2 else fallback

    if aspect.type == "conjunction":
        frequency = (freq1 + freq2) / 2
    elif aspect.type == "opposition":
        frequency = max(freq1, freq2) * 1.5
    elif aspect.type == "trine":
        frequency = (freq1 + freq2) * 0.75
    elif aspect.type == "square":
        frequency = abs(freq1 - freq2) * 1.2
    else:
        frequency = (freq1 + freq2) / 2

    volume = harmonic.energy * strength * harmonic.volume_multiplier
    volume = max(0.1, min(1.0, volume))

    instrument = harmonic.waveform
    genre_instrument = genre_waveform("Sun", genre, tables)
    if genre_instrument != DEFAULT_WAVEFORM:
        instrument = genre_instrument

    logger.debug(
        "Aspect note %s-%s %s: %.0f Hz, volume %.2f, strength %.2f",
        aspect.planet1, aspect.planet2, aspect.type, frequency, volume, strength,
    )
    return AudioNote(
        frequency=round(frequency),
        duration=table.duration,
        volume=volume,
        instrument=instrument,
        start_time=start_time,
    )


def generate_sandbox_composition(
    chart: Chart,
    aspects: Optional[List[AspectRelation]] = None,
    configuration: Optional[SandboxConfiguration] = None,
    duration: float = 60.0,
    genre: Optional[str] = DEFAULT_GENRE,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    tables: Optional[MappingTables] = None
) -> AudioComposition:
    """
    Flat composition plus one aspect note per aspect.

    Aspect notes start after the last planet slot, spaced two seconds apart.
    total_duration runs to the end of the last aspect note so they render.
    A configuration tempo scales every duration by tempo/120 and a
    configuration volume scales every volume.
    """
    tables = tables or get_tables()
    duration = max(0.0, duration)
    notes = planet_notes(chart, duration, genre, tables)
    end_time = duration if notes else 0.0

    for index, aspect in enumerate(aspects or []):
        note = generate_aspect_note(
            aspect, genre, end_time + index * tables.aspect_notes.spacing, tables
        )
        if note is not None:
            notes.append(note)

    if configuration is not None:
        if configuration.tempo:
            tempo_multiplier = configuration.tempo / BASELINE_TEMPO
            for note in notes:
                note.duration *= tempo_multiplier
        if configuration.volume is not None:
            for note in notes:
                note.volume *= configuration.volume

    return _composition(notes, duration, sample_rate)


# =============================================================================
# DAILY TRANSIT COMPOSITION
# =============================================================================

def house_strength(house: int, tables: MappingTables) -> float:
    """Angular houses are strongest, cadent houses weakest."""
    daily = tables.daily
    for group in (daily.angular_houses, daily.succedent_houses, daily.cadent_houses):
        if house in group.houses:
            return group.multiplier
    return 1.0


def generate_daily_composition(
    transits: List[TransitPlanet],
    duration: float = 60.0,
    genre: Optional[str] = DEFAULT_GENRE,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    tables: Optional[MappingTables] = None
) -> AudioComposition:
    """
    Composition for today's transiting planets.

    Every listed body takes a slot (unmapped ones stay silent). Pitch follows
    the degree within the sign, the sign's frequency factor and the house
    tempo factor; loudness follows the planet energy, the house volume, an
    element-match bonus and the angular/succedent/cadent strength.
    """
    tables = tables or get_tables()
    duration = max(0.0, duration)
    daily = tables.daily
    slot = duration / max(len(transits), 1)

    notes = []
    current_time = 0.0
    for planet in transits:
        mapping = daily.planets.get(planet.name)
        if mapping is None:
            logger.warning("No daily mapping found for planet: %s", planet.name)
            current_time += slot
            continue

        house_char = daily.houses.get(planet.house) or daily.houses[1]
        sign_name = planet.sign.name if planet.sign else "Aries"
        sign_char = daily.signs.get(sign_name) or daily.signs["Aries"]

        sign_degree = planet.longitude % 30
        frequency = mapping.base_frequency * (1 + (sign_degree / 30) * 0.5)
        frequency *= sign_char.frequency
        frequency *= house_char.tempo

        volume = mapping.energy * house_char.volume
        if mapping.element == sign_char.element:
            volume *= daily.element_match_multiplier
        volume *= house_strength(planet.house, tables)
        volume = max(0.1, min(1.0, volume))

        notes.append(AudioNote(
            frequency=round(frequency),
            duration=slot * NOTE_FILL,
            volume=volume,
            instrument=genre_waveform(planet.name, genre, tables),
            start_time=current_time,
        ))
        current_time += slot

    logger.info("Daily composition: %d notes over %.1fs", len(notes), duration)
    return _composition(notes, duration, sample_rate)
