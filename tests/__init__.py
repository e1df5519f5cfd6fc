"""
Test Package

Contains unit tests for all modules.
Run with: pytest tests/ -v

Test files follow the pattern:
    test_<module_name>.py

Example:
    tests/test_aspects.py     - Tests for astrosonic/rules/aspects.py
    tests/test_synth.py       - Tests for astrosonic/audio/synth.py
"""
