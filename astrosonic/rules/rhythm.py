"""
Rhythm Module - Modality-Driven Timing Rules

Sign modality decides how a planet moves in time:
    - Cardinal = quarter notes, driving
    - Fixed    = whole notes, sustained
    - Mutable  = eighth notes, flowing

This module provides the phrase-length, rhythm and tempo helpers used
by the melodic generator and the narration.
"""

from typing import Optional

from astrosonic.data.tables import MappingTables, ModalitySpec, get_tables


# =============================================================================
# CONSTANTS
# =============================================================================

TEMPO_RANGES = {
    "slow": (40, 80),
    "moderate": (81, 120),
    "fast": (121, 200),
}

BEATS_PER_PHRASE = 8

HOUSE_LENGTH_STEP = 0.1

# Used when a body has no modality in the tables (extended bodies)
DEFAULT_MODALITY = "Cardinal"


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_tempo_category(tempo: float) -> str:
    """Categorize a tempo (BPM) as slow, moderate, or fast."""
    for category, (low, high) in TEMPO_RANGES.items():
        if low <= tempo <= high:
            return category
    return "moderate"


def get_modality_spec(
    modality: Optional[str],
    tables: Optional[MappingTables] = None
) -> ModalitySpec:
    tables = tables or get_tables()
    return tables.modalities.get(modality or DEFAULT_MODALITY) or tables.modalities[DEFAULT_MODALITY]


def rhythm_multiplier(modality: Optional[str], tables: Optional[MappingTables] = None) -> float:
    """Duration scale for a modality's pattern (quarter 1.0, whole 2.0, eighth 0.5)."""
    tables = tables or get_tables()
    spec = get_modality_spec(modality, tables)
    return tables.rhythm_multipliers.get(spec.rhythm, 1.0)


# =============================================================================
# PHRASE SHAPE
# =============================================================================

def phrase_length(house: int, modality: Optional[str], tables: Optional[MappingTables] = None) -> float:
    """
    Length of a planet's phrase in beats.

    8 beats, stretched 10% per house after the first, then scaled by
    modality (Cardinal x1.2, Fixed x1.5, Mutable x0.8).
    """
    house_multiplier = 1 + (house - 1) * HOUSE_LENGTH_STEP
    return BEATS_PER_PHRASE * house_multiplier * get_modality_spec(modality, tables).phrase_multiplier


def phrase_variation(energy: float, modality: Optional[str], tables: Optional[MappingTables] = None) -> float:
    return (energy + get_modality_spec(modality, tables).variation) / 2
