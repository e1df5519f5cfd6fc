"""
Chart Music Generator - Main Entry Point
========================================

This is the API other code should import. It wraps every generator behind a
small set of functions and adds a one-call pipeline for the CLI.

The pipeline:
    1. Validate the raw chart payload (load_chart)
    2. Build a composition:
         flat    -> one note per planet
         sandbox -> flat notes plus one harmonic note per aspect
         melodic -> role-based phrases, flattened for rendering
    3. Render the composition to WAV bytes
    4. Optionally describe it in words

Usage:
    from astrosonic.app.generate import generate_chart_music, load_chart

    chart = load_chart(payload)
    result = generate_chart_music(chart, mode="melodic", genre="jazz")
    open("chart.wav", "wb").write(result["wav"])

Melodic sessions are returned to the caller. Callers that need to keep
several sessions around can use SessionRegistry.
"""

import logging
import random
import threading
from typing import Dict, List, Optional

from astrosonic.audio.synth import synthesize_wav as _render_wav
from astrosonic.config import Settings
from astrosonic.data.schema import (
    AudioComposition,
    Chart,
    MelodicAudioSession,
    TransitPlanet,
    load_chart,
    load_transits,
)
from astrosonic.data.tables import get_tables
from astrosonic.rules.aspects import calculate_aspects
from astrosonic.rules.flat import (
    generate_daily_composition,
    generate_flat_composition,
    generate_sandbox_composition,
)
from astrosonic.rules.melodic import generate_melodic_composition, session_to_composition
from astrosonic.app.narration import generate_music_narration


logger = logging.getLogger(__name__)

VALID_MODES = ["flat", "melodic", "sandbox"]

__all__ = [
    "VALID_MODES",
    "SessionRegistry",
    "calculate_aspects",
    "format_composition_summary",
    "generate_chart_music",
    "generate_daily_music",
    "generate_daily_composition",
    "generate_flat_composition",
    "generate_melodic_composition",
    "generate_music_narration",
    "generate_sandbox_composition",
    "load_chart",
    "load_transits",
    "session_to_composition",
    "synthesize_wav",
]


# =============================================================================
# PART 1: RENDERING
# =============================================================================

def synthesize_wav(composition: AudioComposition, settings: Optional[Settings] = None) -> bytes:
    """
    Render a composition to a mono 16-bit WAV byte string.

    The sanity threshold and peak headroom come from ``settings``.
    """
    settings = settings or Settings()
    return _render_wav(
        composition,
        min_bytes=settings.min_wav_bytes,
        headroom=settings.headroom,
    )


# =============================================================================
# PART 2: SESSION REGISTRY
# =============================================================================

class SessionRegistry:
    """
    Thread-safe store of melodic sessions keyed by session id.

    Replaces a single "current session" slot: every session keeps its own
    entry, so concurrent requests never overwrite each other.

    Example:
        registry = SessionRegistry()
        session = generate_melodic_composition(chart)
        registry.register(session)
        registry.stop(session.id)
    """

    def __init__(self):
        self._sessions: Dict[str, MelodicAudioSession] = {}
        self._lock = threading.Lock()

    def register(self, session: MelodicAudioSession) -> str:
        with self._lock:
            self._sessions[session.id] = session
        return session.id

    def get(self, session_id: str) -> Optional[MelodicAudioSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def stop(self, session_id: str) -> bool:
        """Mark a session as not playing. Returns False if it is unknown."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            session.is_playing = False
            return True

    def remove(self, session_id: str) -> Optional[MelodicAudioSession]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def active(self) -> List[MelodicAudioSession]:
        with self._lock:
            return [s for s in self._sessions.values() if s.is_playing]

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


# =============================================================================
# PART 3: ONE-CALL PIPELINE
# =============================================================================

def generate_chart_music(
    chart: Chart,
    mode: str = "flat",
    genre: Optional[str] = None,
    duration: Optional[float] = None,
    tempo: Optional[float] = None,
    rng: Optional[random.Random] = None,
    narrate: bool = False,
    settings: Optional[Settings] = None
) -> Dict:
    """
    Build, render and optionally narrate the music for a chart.

    Args:
        chart: Validated chart
        mode: "flat", "melodic" or "sandbox"
        genre: Genre name (defaults to settings.default_genre)
        duration: Length in seconds (defaults to settings.default_duration)
        tempo: BPM for melodic mode and the narration
        rng: Random source for melodic note selection
        narrate: Also produce a MusicNarration
        settings: Runtime settings

    Returns:
        Dictionary containing:
            - mode, genre, tempo, duration
            - aspects: List of AspectRelation
            - composition: AudioComposition that was rendered
            - session: MelodicAudioSession (melodic mode only, else None)
            - wav: WAV bytes
            - narration: MusicNarration or None

    Raises:
        ValueError: If mode is not one of VALID_MODES
    """
    if mode not in VALID_MODES:
        raise ValueError(f"Mode must be one of {VALID_MODES}. Got: '{mode}'")

    settings = settings or Settings()
    tables = get_tables(settings.tables_path)
    genre = genre or settings.default_genre
    duration = settings.default_duration if duration is None else duration
    tempo = tempo or settings.default_tempo

    logger.info("Generating %s composition (genre=%s, %.1fs)", mode, genre, duration)

    aspects = calculate_aspects(chart, tables)
    session = None

    if mode == "melodic":
        session = generate_melodic_composition(
            chart, genre=genre, tempo=tempo, duration=duration, rng=rng, tables=tables
        )
        composition = session_to_composition(session, settings.sample_rate)
    elif mode == "sandbox":
        composition = generate_sandbox_composition(
            chart,
            aspects=aspects,
            duration=duration,
            genre=genre,
            sample_rate=settings.sample_rate,
            tables=tables,
        )
    else:
        composition = generate_flat_composition(
            chart,
            duration=duration,
            genre=genre,
            sample_rate=settings.sample_rate,
            tables=tables,
        )

    wav = synthesize_wav(composition, settings)

    narration = None
    if narrate:
        narration = generate_music_narration(chart, genre, tempo, mode, tables)

    return {
        "mode": mode,
        "genre": genre,
        "tempo": tempo,
        "duration": composition.total_duration,
        "aspects": aspects,
        "composition": composition,
        "session": session,
        "wav": wav,
        "narration": narration,
    }


def generate_daily_music(
    transits: List[TransitPlanet],
    genre: Optional[str] = None,
    duration: Optional[float] = None,
    settings: Optional[Settings] = None
) -> Dict:
    """Build and render the composition for a daily transit snapshot."""
    settings = settings or Settings()
    tables = get_tables(settings.tables_path)
    genre = genre or settings.default_genre
    duration = settings.default_duration if duration is None else duration

    composition = generate_daily_composition(
        transits,
        duration=duration,
        genre=genre,
        sample_rate=settings.sample_rate,
        tables=tables,
    )
    return {
        "mode": "daily",
        "genre": genre,
        "tempo": settings.default_tempo,
        "duration": composition.total_duration,
        "aspects": [],
        "composition": composition,
        "session": None,
        "wav": synthesize_wav(composition, settings),
        "narration": None,
    }


# =============================================================================
# PART 4: OUTPUT FORMATTING
# =============================================================================

def format_composition_summary(result: Dict) -> str:
    """Format a generate_chart_music() result as a short text block."""
    composition = result["composition"]
    lines = []
    lines.append("╔" + "═" * 50 + "╗")
    lines.append("║" + " CHART COMPOSITION ".center(50) + "║")
    lines.append("╠" + "═" * 50 + "╣")
    lines.append(f"║ Mode: {result['mode']} | Genre: {result['genre']}".ljust(51) + "║")
    lines.append(f"║ Tempo: {result['tempo']:g} BPM".ljust(51) + "║")
    lines.append(f"║ Duration: {composition.total_duration:.1f}s".ljust(51) + "║")
    lines.append(f"║ Notes: {len(composition.notes)}".ljust(51) + "║")

    session = result.get("session")
    if session is not None:
        lines.append(f"║ Key: {session.key} | Phrases: {len(session.phrases)}".ljust(51) + "║")

    lines.append("╠" + "─" * 50 + "╣")
    aspects = result.get("aspects") or []
    if aspects:
        for aspect in aspects:
            text = f"{aspect.planet1} {aspect.type} {aspect.planet2} ({aspect.angle:.1f}°)"
            lines.append(f"║   {text}".ljust(51) + "║")
    else:
        lines.append("║   (no aspects)".ljust(51) + "║")

    lines.append("╠" + "─" * 50 + "╣")
    lines.append(f"║ WAV size: {len(result['wav'])} bytes".ljust(51) + "║")
    lines.append("╚" + "═" * 50 + "╝")
    return "\n".join(lines)
