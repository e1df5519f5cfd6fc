"""
Rules Subpackage - Chart-to-music mapping rules

    - aspects.py: Angular relationships between planets
    - harmony.py: Dominant element, scales, instruments, pitch math
    - rhythm.py: Modality-driven phrase length and rhythm
    - melodic.py: Role-based phrase generator
    - flat.py: One-note-per-planet, sandbox and daily compositions
"""

from astrosonic.rules.aspects import calculate_aspects
from astrosonic.rules.harmony import get_musical_config
from astrosonic.rules.melodic import MelodicGenerator, generate_melodic_composition
from astrosonic.rules.flat import generate_flat_composition
