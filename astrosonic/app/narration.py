"""
Narration Generator - Describing a Chart's Composition in Words

Template text that explains what the listener is hearing. It reads the same
tables as the generators (dominant element, scale, aspects, planet roles) so
the description always matches the music. No randomness: the same chart,
genre and tempo always give the same text.

Sections:
    1. Musical Mood           - key, scale, rhythm, tempo, genre character
    2. Planetary Expression   - one line per mapped planet, plus aspects
    3. Interpretive Summary   - chart complexity and emotional theme
"""

from collections import Counter
from typing import List, Optional

from astrosonic.data.schema import AspectRelation, Chart, MusicNarration
from astrosonic.data.tables import MappingTables, get_planet_mapping, get_tables
from astrosonic.rules.harmony import MusicalConfig, get_genre_variation, get_musical_config
from astrosonic.rules.rhythm import get_tempo_category


# =============================================================================
# DESCRIPTION TABLES
# =============================================================================

ELEMENT_MOODS = {
    "Fire": {
        "feeling": "passionate and dynamic",
        "adjective": "with fiery intensity",
        "theme": "creative energy and bold expression",
        "insight": "a soul driven by passion and creative force",
    },
    "Earth": {
        "feeling": "grounded and stable",
        "adjective": "with steady determination",
        "theme": "practical wisdom and material focus",
        "insight": "a spirit anchored in reality and tangible achievement",
    },
    "Air": {
        "feeling": "intellectual and communicative",
        "adjective": "with flowing curiosity",
        "theme": "mental agility and social connection",
        "insight": "a mind that dances between ideas and relationships",
    },
    "Water": {
        "feeling": "emotional and intuitive",
        "adjective": "with deep sensitivity",
        "theme": "emotional depth and spiritual awareness",
        "insight": "a heart that flows with feeling and inner knowing",
    },
}

MODALITY_RHYTHMS = {
    "Cardinal": "driving and initiating",
    "Fixed": "sustained and stable",
    "Mutable": "flowing and adaptable",
}

MODALITY_PRIORITY = ["Cardinal", "Fixed", "Mutable"]

PLANET_ROLE_DESCRIPTIONS = {
    "Sun": "carries the lead melody",
    "Moon": "provides the counter melody",
    "Mercury": "weaves the harmony",
    "Venus": "creates harmonic beauty",
    "Mars": "drives the rhythm",
    "Jupiter": "provides the bassline",
    "Saturn": "structures the foundation",
    "Uranus": "adds unexpected effects",
    "Neptune": "creates ambient atmosphere",
    "Pluto": "modulates the transformation",
}

ASPECT_DESCRIPTIONS = {
    "conjunction": ("united in purpose", "reinforces and amplifies"),
    "sextile": ("harmoniously supportive", "flows naturally together with"),
    "square": ("creates dynamic tension", "challenges and motivates"),
    "trine": ("flows with ease", "supports and stabilizes"),
    "opposition": ("seeks balance", "completes and integrates"),
}

GENRE_DESCRIPTIONS = {
    "classical": "orchestral grandeur",
    "jazz": "improvisational sophistication",
    "electronic": "digital innovation",
    "ambient": "atmospheric meditation",
}

MODE_CONTEXT = {
    "flat": "This musical moment captures your essential nature",
    "sandbox": "This experimental piece explores your creative potential",
    "melodic": "This melodic journey tells the story of your astrological signature",
}

MAX_ASPECT_LINES = 3


# =============================================================================
# HELPERS
# =============================================================================

def dominant_modality(chart: Chart) -> str:
    """Most frequent sign modality; ties go to Cardinal, then Fixed."""
    counts = Counter(position.sign.modality for position in chart.planets.values())
    if not counts:
        return MODALITY_PRIORITY[0]
    best = max(counts.values())
    return next(m for m in MODALITY_PRIORITY if counts.get(m, 0) == best)


def chart_complexity(aspects: List[AspectRelation]) -> str:
    if len(aspects) > 8:
        return "complex and multifaceted"
    if len(aspects) > 4:
        return "balanced and harmonious"
    return "focused and direct"


def emotional_theme(element: str, aspects: List[AspectRelation]) -> str:
    counts = Counter(aspect.type for aspect in aspects)
    if counts["square"] > 3:
        return "dynamic tension and growth through challenge"
    if counts["trine"] > 3:
        return "natural flow and ease of expression"
    if counts["opposition"] > 2:
        return "seeking balance and integration"
    return ELEMENT_MOODS[element]["theme"]


# =============================================================================
# SECTIONS
# =============================================================================

def musical_mood(chart: Chart, config: MusicalConfig, tempo: float) -> str:
    mood = ELEMENT_MOODS[config.dominant_element]
    rhythm = MODALITY_RHYTHMS[dominant_modality(chart)]
    genre_description = GENRE_DESCRIPTIONS.get(config.genre, "musical expression")

    return (
        "Musical Mood\n"
        f"This piece opens in the key of {config.scale[0]} on the "
        f"{', '.join(config.scale)} scale, evoking a {mood['feeling']} atmosphere. "
        f"With a {rhythm} rhythm at a {get_tempo_category(tempo)} {tempo:g} BPM, the music flows {mood['adjective']}. "
        f"The {genre_description} of the {config.genre} style shapes a sonic landscape "
        "that captures the essence of your astrological signature."
    )


def planetary_expression(
    chart: Chart,
    config: MusicalConfig,
    tables: MappingTables
) -> str:
    lines = ["Planetary Expression"]

    for name, position in sorted(chart.planets.items(), key=lambda item: item[1].house):
        mapping = get_planet_mapping(name, tables)
        if mapping is None:
            continue
        role = PLANET_ROLE_DESCRIPTIONS.get(name, "adds its own color")
        variation = get_genre_variation(mapping, config.genre, tables)
        instrument = f" on {variation.instrument}" if variation else ""
        lines.append(
            f"{name} in {position.sign.name} (house {position.house}) {role}{instrument}."
        )

    for aspect in config.aspects[:MAX_ASPECT_LINES]:
        description, effect = ASPECT_DESCRIPTIONS[aspect.type]
        lines.append(
            f"The {aspect.planet1}-{aspect.planet2} {aspect.type} {description}, "
            f"and its {aspect.harmonic.replace('_', ' ')} {effect} the harmonic theme."
        )

    return "\n".join(lines)


def interpretive_summary(config: MusicalConfig, mode: str) -> str:
    mood = ELEMENT_MOODS[config.dominant_element]
    context = MODE_CONTEXT.get(mode, MODE_CONTEXT["flat"])
    return (
        "Interpretive Summary\n"
        f"{context}, offering a sonic mirror of {mood['insight']}. "
        f"The {chart_complexity(config.aspects)} arrangement reflects "
        f"{emotional_theme(config.dominant_element, config.aspects)}, creating a "
        f"{config.genre} soundtrack that resonates with your cosmic fingerprint."
    )


# =============================================================================
# PUBLIC API
# =============================================================================

def generate_music_narration(
    chart: Chart,
    genre: Optional[str] = "electronic",
    tempo: float = 120.0,
    mode: str = "flat",
    tables: Optional[MappingTables] = None
) -> MusicNarration:
    """
    Describe the composition a chart produces.

    Args:
        chart: Validated chart
        genre: Genre name (unknown genres fall back to the default genre)
        tempo: Tempo quoted in the mood section
        mode: Composition mode the text introduces (flat, melodic, sandbox)

    Returns:
        MusicNarration with each section and the sections joined by blank lines
    """
    tables = tables or get_tables()
    config = get_musical_config(chart, genre, tables)

    mood = musical_mood(chart, config, tempo)
    expression = planetary_expression(chart, config, tables)
    summary = interpretive_summary(config, mode)

    return MusicNarration(
        musical_mood=mood,
        planetary_expression=expression,
        interpretive_summary=summary,
        full_narration="\n\n".join([mood, expression, summary]),
    )

