"""
Schema definitions for Astrosonic charts and compositions.

This module defines the Pydantic models that validate and structure every
value flowing through the chart -> music pipeline. Charts coming from the
external provider are validated here once; nothing loosely typed travels
past this boundary.

Two families of models live here:
    - Chart side: Chart, ChartMetadata, PlanetPosition, SignInfo, HouseCusp,
      TransitPlanet, AspectRelation
    - Music side: MelodicNote, MelodicPhrase, MelodicAudioSession,
      AudioNote, AudioComposition, MusicNarration
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from astrosonic.errors import InvalidChartError


# =============================================================================
# VALID OPTIONS
# =============================================================================

VALID_ELEMENTS = ["Fire", "Earth", "Air", "Water"]

VALID_MODALITIES = ["Cardinal", "Fixed", "Mutable"]

VALID_COORDINATE_SYSTEMS = ["tropical", "sidereal"]

VALID_ASPECT_TYPES = ["conjunction", "sextile", "square", "trine", "opposition"]

HOUSE_NUMBERS = range(1, 13)


def _title_choice(value: str, choices: List[str], label: str) -> str:
    """Match a value against a list of title-cased choices, ignoring case."""
    normalized = value.strip().title()
    if normalized not in choices:
        raise ValueError(f"{label} must be one of {choices}. Got: '{value}'")
    return normalized


# =============================================================================
# CHART MODELS
# =============================================================================

class SignInfo(BaseModel):
    """
    A zodiac sign placement.

    Attributes:
        name: Sign name (e.g. 'Aries')
        element: Fire, Earth, Air or Water
        modality: Cardinal, Fixed or Mutable
        degree: Degree within the sign, 0 <= degree < 30
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, examples=["Aries", "Libra"])
    element: str = Field(..., examples=["Fire", "Air"])
    modality: str = Field(..., examples=["Cardinal", "Fixed"])
    degree: float = Field(..., ge=0.0, lt=30.0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return v.strip().title()

    @field_validator("element")
    @classmethod
    def validate_element(cls, v: str) -> str:
        """Store elements title-cased ('fire' -> 'Fire')."""
        return _title_choice(v, VALID_ELEMENTS, "Element")

    @field_validator("modality")
    @classmethod
    def validate_modality(cls, v: str) -> str:
        return _title_choice(v, VALID_MODALITIES, "Modality")


class PlanetPosition(BaseModel):
    """Where one celestial body sits in the chart."""

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(..., ge=0.0, lt=360.0)
    sign: SignInfo
    house: int = Field(..., ge=1, le=12)
    retrograde: bool = False


class HouseCusp(BaseModel):
    model_config = ConfigDict(frozen=True)

    cusp_longitude: float = Field(..., ge=0.0, lt=360.0)
    sign: SignInfo


class ChartMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    birth_datetime: str = Field(..., min_length=1)
    coordinate_system: str = Field(default="tropical")
    conversion_method: Optional[str] = None
    ayanamsa_correction: float = 0.0

    @field_validator("coordinate_system")
    @classmethod
    def validate_coordinate_system(cls, v: str) -> str:
        v_lower = v.lower()
        if v_lower not in VALID_COORDINATE_SYSTEMS:
            raise ValueError(
                f"Coordinate system must be one of {VALID_COORDINATE_SYSTEMS}. Got: '{v}'"
            )
        return v_lower


class Chart(BaseModel):
    """
    A complete astrological chart as delivered by the chart provider.

    Immutable once built and shared read-only by every generator. The
    ``planets`` mapping keeps the provider's declaration order, which is the
    order aspects are enumerated in.

    Example:
        >>> chart = Chart(
        ...     metadata=ChartMetadata(birth_datetime="1990-04-01T12:00:00Z"),
        ...     planets={
        ...         "Sun": PlanetPosition(
        ...             longitude=11.0,
        ...             sign=SignInfo(name="Aries", element="Fire",
        ...                           modality="Cardinal", degree=11.0),
        ...             house=1,
        ...         ),
        ...     },
        ... )
    """

    model_config = ConfigDict(frozen=True)

    metadata: ChartMetadata
    planets: Dict[str, PlanetPosition] = Field(default_factory=dict)
    houses: Dict[int, HouseCusp] = Field(default_factory=dict)

    @field_validator("houses")
    @classmethod
    def validate_houses(cls, v: Dict[int, HouseCusp]) -> Dict[int, HouseCusp]:
        """Ensure house keys are 1..12."""
        invalid = [number for number in v if number not in HOUSE_NUMBERS]
        if invalid:
            raise ValueError(f"House numbers must be 1-12. Got: {invalid}")
        return v


class TransitPlanet(BaseModel):
    """One body in a daily transit snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str
    longitude: float = Field(..., ge=0.0, lt=360.0)
    house: int = Field(..., ge=1, le=12)
    sign: Optional[SignInfo] = None


class AspectRelation(BaseModel):
    """An angular relationship between two planets, classified by orb."""

    model_config = ConfigDict(frozen=True)

    planet1: str
    planet2: str
    type: str
    angle: float
    harmonic: str

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v not in VALID_ASPECT_TYPES:
            raise ValueError(f"Aspect type must be one of {VALID_ASPECT_TYPES}. Got: '{v}'")
        return v


# =============================================================================
# MELODIC MODELS
# =============================================================================

class MelodicNote(BaseModel):
    """
    A note inside a melodic phrase.

    Attributes:
        frequency: Pitch in Hz
        duration: Length in seconds
        velocity: Loudness, 0..1
        instrument: Timbre id from the genre's instrument families
        timestamp: Offset from the start of the owning phrase
        effects: Effect tags (reverb, delay, ...)
    """

    frequency: float = Field(..., ge=0.0)
    duration: float = Field(..., ge=0.0)
    velocity: float = Field(..., ge=0.0, le=1.0)
    instrument: str
    timestamp: float = Field(default=0.0, ge=0.0)
    effects: List[str] = Field(default_factory=list)


class MelodicPhrase(BaseModel):
    """A note sequence owned by exactly one planet."""

    id: str
    planet: str
    role: str
    notes: List[MelodicNote] = Field(default_factory=list)
    start_time: float = 0.0
    duration: float = 0.0
    intensity: float = 0.0
    variation: float = 0.0


class MelodicAudioSession(BaseModel):
    """
    The result of one melodic generation request.

    Owned by the caller; the generator keeps no reference to it.
    """

    id: str
    chart_id: str
    mode: str = "melodic"
    configuration: Dict[str, object] = Field(default_factory=dict)
    is_playing: bool = True
    phrases: List[MelodicPhrase] = Field(default_factory=list)
    scale: List[str] = Field(default_factory=list)
    key: str = "C"
    tempo: float = 120.0
    time_signature: str = "4/4"
    genre: str = "electronic"
    duration: float = 120.0

    @property
    def note_count(self) -> int:
        return sum(len(phrase.notes) for phrase in self.phrases)


# =============================================================================
# FLAT COMPOSITION MODELS
# =============================================================================

class AudioNote(BaseModel):
    frequency: float = Field(..., ge=0.0)
    duration: float = Field(..., ge=0.0)
    volume: float = Field(..., ge=0.0)
    instrument: str = "sine"
    start_time: float = Field(default=0.0, ge=0.0)


class AudioComposition(BaseModel):
    """A flat list of notes ready for the waveform synthesizer."""

    notes: List[AudioNote] = Field(default_factory=list)
    duration: float = Field(..., ge=0.0)
    total_duration: float = Field(..., ge=0.0)
    sample_rate: int = Field(default=44100, gt=0)
    format: str = "wav"


class SandboxConfiguration(BaseModel):
    """Optional overrides for sandbox compositions."""

    tempo: Optional[float] = Field(default=None, gt=0.0)
    volume: Optional[float] = Field(default=None, ge=0.0)


class MusicNarration(BaseModel):
    musical_mood: str
    planetary_expression: str
    interpretive_summary: str
    full_narration: str


# =============================================================================
# CONVENIENCE METHODS
# =============================================================================

def load_chart(payload: Dict) -> Chart:
    """
    Validate a raw chart payload (e.g. parsed JSON) into a Chart.

    Args:
        payload: Dictionary in the provider's chart shape

    Returns:
        Validated, immutable Chart

    Raises:
        InvalidChartError: If the payload does not match the chart shape
    """
    try:
        return Chart.model_validate(payload)
    except ValidationError as exc:
        raise InvalidChartError(f"Invalid chart payload: {exc}") from exc


def load_transits(payload: List[Dict]) -> List[TransitPlanet]:
    """Validate a list of raw transit entries."""
    try:
        return [TransitPlanet.model_validate(item) for item in payload]
    except ValidationError as exc:
        raise InvalidChartError(f"Invalid transit payload: {exc}") from exc
