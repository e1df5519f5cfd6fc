"""Audio Subpackage - additive waveform synthesis and WAV packaging."""

from astrosonic.audio.synth import SAMPLE_RATE, render_samples, synthesize_wav
