"""
Melodic Generator - Role-Based Phrases From Planetary Positions

Every planet with a melodic role becomes one phrase:

    Sun      -> leadMelody       Mars     -> rhythm
    Moon     -> counterMelody    Jupiter  -> bassline
    Mercury  -> harmony          Saturn   -> bassline
    Venus    -> harmony          Uranus   -> effects
    Neptune  -> ambientPad       Pluto    -> modulation

Phrases are built in house order, then two passes rewrite them in place:
    A. Harmonic relationships: for each aspect, the second planet's notes are
       re-pitched to the aspect interval above the first planet's notes.
    B. Rhythmic patterns: note durations are scaled by the planet's modality.

Pitch choice is a weighted draw from the chart's scale. The random source is
injectable so results can be reproduced.
"""

import logging
import math
import random
import uuid
from typing import List, Optional

from astrosonic.data.schema import (
    AspectRelation,
    AudioComposition,
    AudioNote,
    Chart,
    MelodicAudioSession,
    MelodicNote,
    MelodicPhrase,
    PlanetPosition,
)
from astrosonic.data.tables import MappingTables, PlanetaryMapping, get_planet_mapping, get_tables
from astrosonic.rules.aspects import harmonic_interval
from astrosonic.rules.harmony import MusicalConfig, get_genre_variation, get_musical_config, note_frequency
from astrosonic.rules.rhythm import phrase_length, phrase_variation, rhythm_multiplier


logger = logging.getLogger(__name__)

DEFAULT_GENRE = "electronic"
DEFAULT_TEMPO = 120.0
DEFAULT_DURATION = 120.0
DEFAULT_BASE_OCTAVE = 4
PHRASE_GAP = 0.5
SECONDS_PER_MINUTE = 60.0
NOTES_PER_BEAT = 2


# =============================================================================
# NOTE-LEVEL RULES
# =============================================================================

def note_count(role_multiplier: float, energy: float, length: float) -> int:
    """Notes in a phrase: two per beat, scaled by role and energy, at least one."""
    base_count = math.floor(length * NOTES_PER_BEAT)
    return max(1, math.floor(base_count * role_multiplier * energy))


def note_weights(scale_size: int, position: PlanetPosition) -> List[float]:
    """
    Selection weights for each scale degree.

    Each degree is scored by how close it sits to the point implied by the
    sign degree (degree/30 of the way up the scale) and to the point implied
    by the house (house/12 of the way up); the two scores are averaged and
    normalized to sum to 1.
    """
    degree_point = (position.sign.degree / 30) * scale_size
    house_point = (position.house / 12) * scale_size

    weights = []
    for index in range(scale_size):
        degree_weight = 1 - abs(index - degree_point) / scale_size
        house_weight = 1 - abs(index - house_point) / scale_size
        weights.append((degree_weight + house_weight) / 2)

    total = sum(weights)
    if total <= 0:
        return [1 / scale_size] * scale_size
    return [w / total for w in weights]


def weighted_note_selection(scale_size: int, position: PlanetPosition, rng: random.Random) -> int:
    """Roulette-wheel draw of a scale degree index."""
    draw = rng.random()
    cumulative = 0.0
    for index, weight in enumerate(note_weights(scale_size, position)):
        cumulative += weight
        if draw <= cumulative:
            return index
    # Float rounding can leave the cumulative sum a hair under the draw
    return rng.randrange(scale_size)


def note_velocity(energy: float, house: int) -> float:
    energy_velocity = 0.3 + energy * 0.7
    house_velocity = 0.8 + (house / 12) * 0.2
    return min(1.0, (energy_velocity + house_velocity) / 2)


def note_effects(
    planet: str,
    position: PlanetPosition,
    mapping: PlanetaryMapping,
    tables: MappingTables
) -> List[str]:
    """Effect tags for a planet's notes. Tags accumulate."""
    rules = tables.effect_rules
    effects = []

    if planet in rules.planets:
        effects.append(rules.planets[planet])
    if mapping.element in rules.elements:
        effects.append(rules.elements[mapping.element])
    if position.house <= rules.low_house.max_house:
        effects.append(rules.low_house.effect)
    if position.house >= rules.high_house.min_house:
        effects.append(rules.high_house.effect)

    return effects


# =============================================================================
# GENERATOR
# =============================================================================

class MelodicGenerator:
    """
    Builds a MelodicAudioSession from a chart.

    The generator holds configuration only (tables and random source); every
    call returns a fresh session owned by the caller.

    Usage:
        generator = MelodicGenerator(rng=random.Random(7))
        session = generator.generate(chart, genre="jazz", tempo=96)
        print(session.note_count)
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        tables: Optional[MappingTables] = None
    ):
        self.rng = rng or random.Random()
        self.tables = tables or get_tables()

    def generate(
        self,
        chart: Chart,
        genre: Optional[str] = DEFAULT_GENRE,
        tempo: float = DEFAULT_TEMPO,
        duration: float = DEFAULT_DURATION
    ) -> MelodicAudioSession:
        """Generate the phrases for a chart and apply both post-passes."""
        duration = max(0.0, duration)
        config = get_musical_config(chart, genre, self.tables)

        logger.info("Generating melodic chart composition")
        logger.info("  Scale: %s", ", ".join(config.scale))
        logger.info("  Tempo: %s BPM", tempo)
        logger.info("  Aspects: %d planetary relationships", len(config.aspects))

        phrases = self.generate_phrases(chart, config)
        apply_harmonic_relationships(phrases, config.aspects, self.tables)
        apply_rhythmic_patterns(phrases, self.tables)

        session = MelodicAudioSession(
            id=f"melodic_{uuid.uuid4().hex}",
            chart_id=chart.metadata.birth_datetime,
            configuration={
                "mode": "melodic",
                "genre": config.genre,
                "tempo": tempo,
                "duration": duration,
            },
            phrases=phrases,
            scale=config.scale,
            key=config.scale[0],
            tempo=tempo,
            genre=config.genre,
            duration=duration,
        )

        logger.info(
            "Generated %d melodic phrases, %d notes", len(phrases), session.note_count
        )
        return session

    # -------------------------------------------------------------------------
    # Phrases
    # -------------------------------------------------------------------------

    def generate_phrases(self, chart: Chart, config: MusicalConfig) -> List[MelodicPhrase]:
        """One phrase per roled and mapped planet, in ascending house order."""
        phrases = []
        current_time = 0.0
        ordered = sorted(chart.planets.items(), key=lambda item: item[1].house)

        for index, (planet, position) in enumerate(ordered):
            role = self.tables.planet_roles.get(planet)
            mapping = get_planet_mapping(planet, self.tables)
            if not role or mapping is None:
                logger.debug("Skipping %s: no melodic role or mapping", planet)
                continue

            length = phrase_length(position.house, mapping.modality, self.tables)
            notes = self.generate_phrase_notes(planet, position, mapping, role, length, config)

            phrases.append(MelodicPhrase(
                id=f"{planet}_phrase_{index}",
                planet=planet,
                role=role,
                notes=notes,
                start_time=current_time,
                duration=length,
                intensity=mapping.energy,
                variation=phrase_variation(mapping.energy, mapping.modality, self.tables),
            ))
            current_time += length + PHRASE_GAP

        return phrases

    def generate_phrase_notes(
        self,
        planet: str,
        position: PlanetPosition,
        mapping: PlanetaryMapping,
        role: str,
        length: float,
        config: MusicalConfig
    ) -> List[MelodicNote]:
        role_spec = self.tables.roles[role]
        count = note_count(role_spec.count, mapping.energy, length)
        slot = length / count

        octave = self.base_octave(mapping, config.genre) + role_spec.octave
        instrument = config.instruments.pick(role_spec.family, role_spec.slot)
        velocity = note_velocity(mapping.energy, position.house)
        effects = note_effects(planet, position, mapping, self.tables)

        notes = []
        for i in range(count):
            degree = weighted_note_selection(len(config.scale), position, self.rng)
            notes.append(MelodicNote(
                frequency=note_frequency(config.scale[degree], octave),
                duration=slot * role_spec.duration,
                velocity=velocity,
                instrument=instrument,
                timestamp=i * slot,
                effects=list(effects),
            ))
        return notes

    def base_octave(self, mapping: PlanetaryMapping, genre: str) -> int:
        variation = get_genre_variation(mapping, genre, self.tables)
        return variation.octave if variation else DEFAULT_BASE_OCTAVE


# =============================================================================
# POST-PASSES
# =============================================================================

def _find_phrase(phrases: List[MelodicPhrase], planet: str) -> Optional[MelodicPhrase]:
    return next((phrase for phrase in phrases if phrase.planet == planet), None)


def apply_harmonic_relationships(
    phrases: List[MelodicPhrase],
    aspects: List[AspectRelation],
    tables: Optional[MappingTables] = None
) -> None:
    """
    Re-pitch the second phrase of every aspected pair.

    For each index present in both phrases, the second phrase's note becomes
    the first phrase's note shifted by the aspect interval (conjunction 0,
    sextile 4, square 6, trine 7, opposition 12 semitones). Trailing notes of
    the longer phrase are left alone.
    """
    for aspect in aspects:
        first = _find_phrase(phrases, aspect.planet1)
        second = _find_phrase(phrases, aspect.planet2)
        if first is None or second is None:
            continue

        for lead, follower in zip(first.notes, second.notes):
            follower.frequency = harmonic_interval(lead.frequency, aspect.type, tables)


def apply_rhythmic_patterns(
    phrases: List[MelodicPhrase],
    tables: Optional[MappingTables] = None
) -> None:
    """Scale note durations by the owning planet's modality rhythm."""
    for phrase in phrases:
        mapping = get_planet_mapping(phrase.planet, tables)
        if mapping is None:
            continue

        multiplier = rhythm_multiplier(mapping.modality, tables)
        for note in phrase.notes:
            note.duration = note.duration * multiplier


# =============================================================================
# RENDERING BRIDGE
# =============================================================================

def session_to_composition(session: MelodicAudioSession, sample_rate: int = 44100) -> AudioComposition:
    """
    Flatten a melodic session into an AudioComposition for the synthesizer.

    Phrase times are in beats and are converted to seconds at the session
    tempo: note start = (phrase start + note timestamp) x 60/tempo, and
    note length = duration x 60/tempo. Volume = velocity. The composition
    lasts as long as the session duration or the last note, whichever is
    longer.
    """
    tempo = session.tempo if session.tempo > 0 else DEFAULT_TEMPO
    seconds_per_beat = SECONDS_PER_MINUTE / tempo

    notes = []
    for phrase in session.phrases:
        for note in phrase.notes:
            notes.append(AudioNote(
                frequency=note.frequency,
                duration=note.duration * seconds_per_beat,
                volume=note.velocity,
                instrument=note.instrument,
                start_time=(phrase.start_time + note.timestamp) * seconds_per_beat,
            ))

    end = max((note.start_time + note.duration for note in notes), default=0.0)
    duration = max(session.duration, end, 0.0)
    return AudioComposition(
        notes=notes,
        duration=duration,
        total_duration=duration,
        sample_rate=sample_rate,
    )


def generate_melodic_composition(
    chart: Chart,
    genre: Optional[str] = DEFAULT_GENRE,
    tempo: float = DEFAULT_TEMPO,
    duration: float = DEFAULT_DURATION,
    rng: Optional[random.Random] = None,
    tables: Optional[MappingTables] = None
) -> MelodicAudioSession:
    """Convenience wrapper around MelodicGenerator.generate()."""
    return MelodicGenerator(rng=rng, tables=tables).generate(chart, genre, tempo, duration)
