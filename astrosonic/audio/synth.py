"""
Waveform Synthesizer - Notes to 16-bit PCM WAV

Deliberately simple additive synthesis:
    1. Allocate a silent buffer of duration x sample_rate samples
    2. Render each note with its oscillator, scaled by volume, and add it in
       at its start time (writes past the end of the buffer are dropped)
    3. Normalize so the loudest sample sits at 0.8 of full scale
    4. Quantize to signed 16-bit and prepend a canonical 44-byte WAV header

Oscillators (f = frequency, t = seconds since the note started):
    sine      sin(2*pi*f*t)
    sawtooth  2*frac(f*t) - 1
    square    1 if frac(f*t) < 0.5 else -1
    triangle  |2*frac(f*t) - 1| * 2 - 1

Anything else renders as a sine.
"""

import logging
import struct
from typing import Callable, Dict, List

import numpy as np

from astrosonic.data.schema import AudioComposition, AudioNote


logger = logging.getLogger(__name__)

SAMPLE_RATE = 44_100
HEADROOM = 0.8
PCM_SCALE = 32767

# Rendered files smaller than this are reported, not rejected
MIN_WAV_BYTES = 1000


# =============================================================================
# OSCILLATORS
# =============================================================================

def _phase(frequency: float, t: np.ndarray) -> np.ndarray:
    """Fractional part of f*t, in [0, 1)."""
    cycles = frequency * t
    return cycles - np.floor(cycles)


def sine_wave(frequency: float, t: np.ndarray) -> np.ndarray:
    return np.sin(2 * np.pi * frequency * t)


def sawtooth_wave(frequency: float, t: np.ndarray) -> np.ndarray:
    return 2 * _phase(frequency, t) - 1


def square_wave(frequency: float, t: np.ndarray) -> np.ndarray:
    return np.where(_phase(frequency, t) < 0.5, 1.0, -1.0)


def triangle_wave(frequency: float, t: np.ndarray) -> np.ndarray:
    return np.abs(2 * _phase(frequency, t) - 1) * 2 - 1


OSCILLATORS: Dict[str, Callable[[float, np.ndarray], np.ndarray]] = {
    "sine": sine_wave,
    "sawtooth": sawtooth_wave,
    "square": square_wave,
    "triangle": triangle_wave,
}


def get_oscillator(waveform: str) -> Callable[[float, np.ndarray], np.ndarray]:
    return OSCILLATORS.get(waveform, sine_wave)


# =============================================================================
# MIXING
# =============================================================================

def render_note(note: AudioNote, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    """Samples for one note, already scaled by its volume."""
    count = int(note.duration * sample_rate)
    t = np.arange(count, dtype=np.float64) / sample_rate
    return get_oscillator(note.instrument)(note.frequency, t) * note.volume


def render_samples(
    notes: List[AudioNote],
    sample_rate: int = SAMPLE_RATE,
    duration: float = 0.0,
    headroom: float = HEADROOM
) -> np.ndarray:
    """
    Mix notes into a normalized float buffer.

    Args:
        notes: Notes to mix; order does not matter
        sample_rate: Samples per second
        duration: Buffer length in seconds
        headroom: Peak level after normalization

    Returns:
        float64 array of floor(duration x sample_rate) samples. Silent when
        there are no notes (the zero peak is left alone).
    """
    length = max(0, int(duration * sample_rate))
    buffer = np.zeros(length, dtype=np.float64)

    for note in notes:
        start = int(note.start_time * sample_rate)
        if start >= length:
            continue
        samples = render_note(note, sample_rate)
        end = min(length, start + len(samples))
        buffer[start:end] += samples[:end - start]

    peak = float(np.max(np.abs(buffer))) if length else 0.0
    if peak > 0:
        buffer *= headroom / peak
    return buffer


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Quantize [-1, 1] floats to little-endian signed 16-bit."""
    quantized = np.round(np.clip(samples, -1.0, 1.0) * PCM_SCALE)
    return quantized.astype("<i2")


# =============================================================================
# WAV PACKAGING
# =============================================================================

def wav_header(data_size: int, sample_rate: int = SAMPLE_RATE) -> bytes:
    """
    Canonical 44-byte RIFF/WAVE header for mono 16-bit PCM.

    Offsets: RIFF@0, size@4, WAVE@8, 'fmt '@12, data@36, data size@40.
    """
    channels = 1
    bits_per_sample = 16
    block_align = channels * bits_per_sample // 8
    byte_rate = sample_rate * block_align

    return struct.pack(
        "<4sI4s4sIHHIIHH4sI",
        b"RIFF",
        36 + data_size,
        b"WAVE",
        b"fmt ",
        16,
        1,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
        b"data",
        data_size,
    )


def synthesize_wav(
    composition: AudioComposition,
    min_bytes: int = MIN_WAV_BYTES,
    headroom: float = HEADROOM
) -> bytes:
    """
    Render a composition to WAV bytes.

    The buffer covers ``composition.total_duration`` seconds at the
    composition's sample rate. An empty note list gives a header followed by
    silence; an unexpectedly small result is logged but still returned.

    Example:
        >>> wav = synthesize_wav(AudioComposition(duration=1.0, total_duration=1.0))
        >>> len(wav)
        88244
    """
    sample_rate = composition.sample_rate
    samples = render_samples(
        composition.notes, sample_rate, composition.total_duration, headroom
    )
    pcm = to_pcm16(samples).tobytes()
    wav = wav_header(len(pcm), sample_rate) + pcm

    logger.debug(
        "Synthesized %d notes into %d samples (%d bytes)",
        len(composition.notes), len(samples), len(wav),
    )
    if len(wav) < min_bytes:
        logger.warning(
            "Generated WAV is only %d bytes (expected at least %d)", len(wav), min_bytes
        )
    return wav
