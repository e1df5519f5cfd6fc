"""
Data Subpackage

This package holds the data structures and static tables:
    - schema.py: Pydantic models for charts, aspects, phrases and compositions
    - tables.py: Loader and typed models for the mapping tables
    - mappings.yaml: Planetary, aspect, modality, scale, genre and effect tables
"""

from astrosonic.data.schema import Chart, load_chart
