"""
Tests for astrosonic/audio/synth.py

Run with: pytest tests/test_synth.py -v
"""

import io
import logging
import struct
import wave

import numpy as np
import pytest

from astrosonic.audio.synth import (
    get_oscillator,
    render_samples,
    sawtooth_wave,
    sine_wave,
    square_wave,
    synthesize_wav,
    triangle_wave,
    wav_header,
)
from astrosonic.data.schema import AudioComposition, AudioNote


def _composition(notes, duration=1.0, sample_rate=44100):
    return AudioComposition(
        notes=notes, duration=duration, total_duration=duration, sample_rate=sample_rate
    )


def _pcm(wav):
    return np.frombuffer(wav[44:], dtype="<i2")


class TestOscillators:

    def test_values_at_phase_zero(self):
        t = np.zeros(1)
        assert sine_wave(440.0, t)[0] == 0.0
        assert sawtooth_wave(440.0, t)[0] == -1.0
        assert square_wave(440.0, t)[0] == 1.0
        assert triangle_wave(440.0, t)[0] == 1.0

    def test_square_flips_halfway(self):
        t = np.array([0.0, 0.6])
        assert list(square_wave(1.0, t)) == [1.0, -1.0]

    def test_triangle_bottoms_out_halfway(self):
        assert triangle_wave(1.0, np.array([0.5]))[0] == pytest.approx(-1.0)

    def test_outputs_stay_in_range(self):
        t = np.arange(2000) / 44100
        for waveform in ["sine", "sawtooth", "square", "triangle"]:
            samples = get_oscillator(waveform)(523.0, t)
            assert np.all(samples <= 1.0) and np.all(samples >= -1.0)

    def test_unknown_waveform_is_sine(self):
        assert get_oscillator("theremin") is sine_wave


class TestRenderSamples:

    def test_empty_is_silent(self):
        samples = render_samples([], 44100, 1.0)
        assert len(samples) == 44100
        assert not samples.any()

    def test_peak_is_normalized(self):
        note = AudioNote(frequency=440.0, duration=0.5, volume=0.3, instrument="square")
        samples = render_samples([note], 8000, 1.0)
        assert np.max(np.abs(samples)) == pytest.approx(0.8)

    def test_note_past_the_end_is_clipped(self):
        note = AudioNote(frequency=440.0, duration=2.0, volume=1.0, start_time=0.5)
        samples = render_samples([note], 8000, 1.0)
        assert len(samples) == 8000
        assert not samples[:4000].any()
        assert samples[4000:].any()

    def test_note_after_the_end_is_dropped(self):
        note = AudioNote(frequency=440.0, duration=1.0, volume=1.0, start_time=5.0)
        assert not render_samples([note], 8000, 1.0).any()


class TestSynthesizeWav:

    def test_empty_composition(self):
        wav = synthesize_wav(_composition([], duration=1.0))
        assert len(wav) == 44 + 44100 * 2
        assert wav[44:] == bytes(44100 * 2)

    def test_header_layout(self):
        wav = synthesize_wav(_composition([], duration=0.5, sample_rate=22050))
        data_size = 22050 // 2 * 2

        assert wav[0:4] == b"RIFF"
        assert struct.unpack("<I", wav[4:8])[0] == 36 + data_size
        assert wav[8:12] == b"WAVE"
        assert wav[12:16] == b"fmt "
        assert struct.unpack("<IHHIIHH", wav[16:36]) == (16, 1, 1, 22050, 44100, 2, 16)
        assert wav[36:40] == b"data"
        assert struct.unpack("<I", wav[40:44])[0] == data_size

    def test_readable_by_wave_module(self):
        note = AudioNote(frequency=330.0, duration=0.5, volume=0.7, instrument="triangle")
        wav = synthesize_wav(_composition([note], duration=1.0, sample_rate=16000))

        with wave.open(io.BytesIO(wav), "rb") as reader:
            assert reader.getnchannels() == 1
            assert reader.getsampwidth() == 2
            assert reader.getframerate() == 16000
            assert reader.getnframes() == 16000

    def test_peak_headroom(self):
        notes = [
            AudioNote(frequency=264.0, duration=1.0, volume=0.9, instrument="sawtooth"),
            AudioNote(frequency=330.0, duration=1.0, volume=0.9, instrument="square"),
            AudioNote(frequency=392.0, duration=1.0, volume=0.9, instrument="sine"),
        ]
        peak = int(np.max(np.abs(_pcm(synthesize_wav(_composition(notes))).astype(np.int32))))
        assert peak <= round(0.8 * 32767) + 1
        assert peak >= round(0.8 * 32767) - 1

    def test_header_helper_size(self):
        assert len(wav_header(0)) == 44

    def test_small_output_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            wav = synthesize_wav(_composition([], duration=0.0))
        assert len(wav) == 44
        assert "only 44 bytes" in caplog.text
