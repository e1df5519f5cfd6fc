"""
App Subpackage

This package contains the user-facing entry points:
    - generate.py: Facade over every generator, plus the session registry
    - narration.py: Text describing a chart's composition
    - cli.py: The ``astrosonic`` command-line tool

Usage:
    astrosonic chart.json --mode melodic --genre jazz -o chart.wav
"""
