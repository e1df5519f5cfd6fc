"""
Tests for astrosonic/app/generate.py

Run with: pytest tests/test_generate.py -v
"""

import random
import threading

import pytest

from astrosonic.app.generate import (
    SessionRegistry,
    format_composition_summary,
    generate_chart_music,
    generate_daily_music,
    generate_melodic_composition,
    load_transits,
)
from astrosonic.config import Settings


SMALL = Settings(sample_rate=8000, default_duration=4.0)


class TestGenerateChartMusic:

    def test_flat(self, sun_moon_opposition):
        result = generate_chart_music(sun_moon_opposition, settings=SMALL)
        assert result["mode"] == "flat"
        assert result["genre"] == "ambient"
        assert len(result["composition"].notes) == 2
        assert result["session"] is None
        assert result["narration"] is None
        assert len(result["wav"]) == 44 + 4 * 8000 * 2

    def test_sandbox_extends_duration(self, sun_moon_opposition):
        result = generate_chart_music(sun_moon_opposition, mode="sandbox", settings=SMALL)
        composition = result["composition"]
        assert len(composition.notes) == 3
        assert composition.total_duration == pytest.approx(7.0)
        assert len(result["wav"]) == 44 + 7 * 8000 * 2

    def test_melodic(self, full_chart):
        result = generate_chart_music(
            full_chart, mode="melodic", genre="jazz", tempo=90,
            rng=random.Random(3), narrate=True, settings=SMALL,
        )
        session = result["session"]
        assert session is not None
        assert len(result["composition"].notes) == session.note_count
        assert result["composition"].sample_rate == 8000
        assert "90 BPM" in result["narration"].musical_mood

    def test_melodic_is_reproducible(self, full_chart):
        first = generate_chart_music(full_chart, mode="melodic", rng=random.Random(9), settings=SMALL)
        second = generate_chart_music(full_chart, mode="melodic", rng=random.Random(9), settings=SMALL)
        assert first["wav"] == second["wav"]

    def test_unknown_mode(self, sun_moon_opposition):
        with pytest.raises(ValueError):
            generate_chart_music(sun_moon_opposition, mode="overlay")

    def test_summary(self, sun_moon_opposition):
        result = generate_chart_music(sun_moon_opposition, settings=SMALL)
        summary = format_composition_summary(result)
        assert "CHART COMPOSITION" in summary
        assert "Sun opposition Moon" in summary


class TestGenerateDailyMusic:

    def test_daily(self):
        transits = load_transits([
            {"name": "Sun", "longitude": 10.0, "house": 1},
            {"name": "Moon", "longitude": 100.0, "house": 4},
        ])
        result = generate_daily_music(transits, settings=SMALL)
        assert result["mode"] == "daily"
        assert len(result["composition"].notes) == 2
        assert len(result["wav"]) == 44 + 4 * 8000 * 2


class TestSessionRegistry:

    def test_register_get_stop_remove(self, full_chart):
        registry = SessionRegistry()
        session = generate_melodic_composition(full_chart, rng=random.Random(1))

        session_id = registry.register(session)
        assert registry.get(session_id) is session
        assert registry.active() == [session]

        assert registry.stop(session_id) is True
        assert session.is_playing is False
        assert registry.active() == []

        assert registry.remove(session_id) is session
        assert registry.get(session_id) is None
        assert registry.stop(session_id) is False

    def test_sessions_do_not_overwrite_each_other(self, sun_moon_opposition):
        registry = SessionRegistry()
        ids = []

        def worker(index):
            session = generate_melodic_composition(sun_moon_opposition, rng=random.Random(index))
            ids.append(registry.register(session))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(ids)) == 8
        assert len(registry) == 8
        for session_id in ids:
            assert registry.get(session_id).id == session_id

    def test_back_to_back_sessions_get_distinct_ids(self, sun_moon_opposition):
        registry = SessionRegistry()
        for index in range(20):
            registry.register(generate_melodic_composition(sun_moon_opposition, rng=random.Random(index)))
        assert len(registry) == 20
