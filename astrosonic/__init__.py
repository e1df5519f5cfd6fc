"""
Astrosonic - Astrological Charts as Music

Turns a birth chart (planet positions in signs and houses) into sound:
aspects become harmonic intervals, elements pick the scale, modalities set
the rhythm, and planets play roles in an arrangement.

Subpackages:
    - astrosonic.data: Chart/composition schemas and the static mapping tables
    - astrosonic.rules: Aspects, harmony, rhythm, melodic and flat generators
    - astrosonic.audio: Waveform synthesis to 16-bit PCM WAV
    - astrosonic.app: Generation facade, narration and the command-line tool

Example usage:
    from astrosonic.app.generate import load_chart, generate_flat_composition, synthesize_wav

    chart = load_chart(payload)
    wav = synthesize_wav(generate_flat_composition(chart, 30, "ambient"))
"""

__version__ = "0.1.0"
