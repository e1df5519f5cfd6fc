"""
Static mapping tables.

The planetary, aspect, modality, scale, genre and effect tables are data in
``mappings.yaml``. This module parses that file once with PyYAML, validates it
into frozen Pydantic models and hands the same instance to every caller.

Usage:
    from astrosonic.data.tables import get_tables, get_planet_mapping

    tables = get_tables()
    sun = get_planet_mapping("Sun")
    print(sun.base_frequency)   # 264.0
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from astrosonic.errors import ConfigError


DEFAULT_TABLES_PATH = Path(__file__).with_name("mappings.yaml")


# =============================================================================
# TABLE MODELS
# =============================================================================

class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GenreVariation(_Frozen):
    instrument: str
    octave: int


class PlanetaryMapping(_Frozen):
    """
    Musical identity of one celestial body.

    Extended bodies (Chiron, the Nodes, asteroids) carry only a base frequency,
    energy, element and waveform; they have no modality and no genre variations.
    """

    base_frequency: float = Field(..., gt=0.0)
    energy: float = Field(..., ge=0.0, le=1.0)
    element: str
    modality: Optional[str] = None
    dignity: str = "rulership"
    musical_role: str = ""
    waveform: str = "sine"
    genre_variations: Dict[str, GenreVariation] = Field(default_factory=dict)


class AspectSpec(_Frozen):
    windows: List[Tuple[float, float]]
    harmonic: str
    interval: int

    def matches(self, angle: float) -> bool:
        return any(low <= angle <= high for low, high in self.windows)


class ModalitySpec(_Frozen):
    rhythm: str
    phrase_multiplier: float
    variation: float


class InstrumentFamilies(_Frozen):
    melody: List[str]
    harmony: List[str]
    rhythm: List[str]
    bass: List[str]
    effects: List[str]

    def pick(self, family: str, slot: int = 0) -> str:
        """Instrument at ``slot`` in a family, falling back to the first one."""
        instruments = getattr(self, family)
        if slot < len(instruments):
            return instruments[slot]
        return instruments[0]


class RoleSpec(_Frozen):
    count: float
    duration: float
    octave: int
    family: str
    slot: int = 0


class HouseEffect(_Frozen):
    effect: str
    max_house: Optional[int] = None
    min_house: Optional[int] = None


class EffectRules(_Frozen):
    planets: Dict[str, str] = Field(default_factory=dict)
    elements: Dict[str, str] = Field(default_factory=dict)
    low_house: HouseEffect
    high_house: HouseEffect


class AspectNoteType(_Frozen):
    energy: float
    volume_multiplier: float
    waveform: str


class AspectNoteTable(_Frozen):
    duration: float
    spacing: float
    strength_range: float
    types: Dict[str, AspectNoteType]


class DailyPlanet(_Frozen):
    base_frequency: float
    energy: float
    element: str


class DailyHouse(_Frozen):
    tempo: float
    volume: float


class DailySign(_Frozen):
    frequency: float
    element: str


class HouseGroup(_Frozen):
    houses: List[int]
    multiplier: float


class DailyTable(_Frozen):
    planets: Dict[str, DailyPlanet]
    houses: Dict[int, DailyHouse]
    signs: Dict[str, DailySign]
    angular_houses: HouseGroup
    succedent_houses: HouseGroup
    cadent_houses: HouseGroup
    element_match_multiplier: float


class MappingTables(_Frozen):
    """Every static table used by the generators."""

    planets: Dict[str, PlanetaryMapping]
    planet_aliases: Dict[str, str] = Field(default_factory=dict)
    signs: List[str]
    element_priority: List[str]
    aspects: Dict[str, AspectSpec]
    modalities: Dict[str, ModalitySpec]
    rhythm_multipliers: Dict[str, float]
    element_scales: Dict[str, Dict[str, List[str]]]
    genres: List[str]
    default_genre: str
    genre_instruments: Dict[str, InstrumentFamilies]
    genre_waveforms: Dict[str, Dict[str, str]]
    planet_roles: Dict[str, str]
    roles: Dict[str, RoleSpec]
    effect_rules: EffectRules
    aspect_notes: AspectNoteTable
    daily: DailyTable


# =============================================================================
# LOADING
# =============================================================================

def load_tables(path: Path) -> MappingTables:
    """
    Parse and validate a tables file.

    Args:
        path: YAML file in the mappings.yaml layout

    Returns:
        Validated MappingTables

    Raises:
        ConfigError: If the file is missing, is not YAML, or fails validation
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Could not read mapping tables from {path}: {exc}") from exc

    try:
        return MappingTables.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"Invalid mapping tables in {path}: {exc}") from exc


@lru_cache(maxsize=None)
def get_tables(path: Optional[str] = None) -> MappingTables:
    """Load the tables once per path and reuse them for every request."""
    return load_tables(Path(path) if path else DEFAULT_TABLES_PATH)


# =============================================================================
# LOOKUP HELPERS
# =============================================================================

def canonical_planet_name(name: str, tables: Optional[MappingTables] = None) -> str:
    tables = tables or get_tables()
    return tables.planet_aliases.get(name, name)


def get_planet_mapping(
    name: str,
    tables: Optional[MappingTables] = None
) -> Optional[PlanetaryMapping]:
    """Mapping for a planet name (aliases accepted), or None when unmapped."""
    tables = tables or get_tables()
    return tables.planets.get(canonical_planet_name(name, tables))


def sign_index(sign_name: str, tables: Optional[MappingTables] = None) -> int:
    """1-based zodiac index of a sign; unknown names count as Aries."""
    tables = tables or get_tables()
    try:
        return tables.signs.index(sign_name.strip().title()) + 1
    except ValueError:
        return 1


def resolve_genre(genre: Optional[str], tables: Optional[MappingTables] = None) -> str:
    """Lowercase a genre name, falling back to the default genre if unknown."""
    tables = tables or get_tables()
    if genre and genre.lower() in tables.genres:
        return genre.lower()
    return tables.default_genre
