"""
Tests for astrosonic/app/narration.py

Run with: pytest tests/test_narration.py -v
"""

from astrosonic.app.narration import (
    chart_complexity,
    dominant_modality,
    emotional_theme,
    generate_music_narration,
)
from tests.conftest import make_chart, position


class TestNarration:

    def test_sections_join_into_full_text(self, sun_moon_opposition):
        narration = generate_music_narration(sun_moon_opposition, "jazz", 96)
        assert narration.full_narration == "\n\n".join([
            narration.musical_mood,
            narration.planetary_expression,
            narration.interpretive_summary,
        ])

    def test_mood_mentions_key_tempo_and_genre(self, sun_moon_opposition):
        mood = generate_music_narration(sun_moon_opposition, "jazz", 96).musical_mood
        assert "key of C" in mood
        assert "moderate 96 BPM" in mood
        assert "improvisational sophistication" in mood

    def test_planets_and_aspects_are_described(self, sun_moon_opposition):
        text = generate_music_narration(sun_moon_opposition, "classical").planetary_expression
        assert "Sun in Aries (house 1) carries the lead melody on brass." in text
        assert "Moon in Libra (house 7) provides the counter melody" in text
        assert "Sun-Moon opposition seeks balance" in text

    def test_deterministic(self, full_chart):
        assert generate_music_narration(full_chart) == generate_music_narration(full_chart)

    def test_mode_changes_the_summary(self, full_chart):
        melodic = generate_music_narration(full_chart, mode="melodic").interpretive_summary
        sandbox = generate_music_narration(full_chart, mode="sandbox").interpretive_summary
        assert "melodic journey" in melodic
        assert "experimental piece" in sandbox

    def test_empty_chart(self):
        narration = generate_music_narration(make_chart())
        assert "passionate and dynamic" in narration.musical_mood
        assert narration.planetary_expression == "Planetary Expression"


class TestNarrationHelpers:

    def test_dominant_modality(self):
        chart = make_chart(A=position("Taurus"), B=position("Leo"), C=position("Aries"))
        assert dominant_modality(chart) == "Fixed"
        assert dominant_modality(make_chart()) == "Cardinal"

    def test_complexity(self):
        assert chart_complexity([]) == "focused and direct"

    def test_theme_falls_back_to_element(self):
        assert emotional_theme("Water", []) == "emotional depth and spiritual awareness"
