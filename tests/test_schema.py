"""
Tests for astrosonic/data/schema.py and astrosonic/data/tables.py

Run with: pytest tests/test_schema.py -v
"""

import pytest
import yaml
from pydantic import ValidationError

from astrosonic.data.schema import SignInfo, load_chart, load_transits
from astrosonic.data.tables import (
    DEFAULT_TABLES_PATH,
    get_planet_mapping,
    load_tables,
    resolve_genre,
    sign_index,
)
from astrosonic.errors import ConfigError, InvalidChartError


class TestLoadChart:

    def test_valid_payload(self, chart_payload):
        chart = load_chart(chart_payload)
        assert list(chart.planets) == ["Sun", "Moon"]
        assert chart.metadata.coordinate_system == "tropical"
        assert 1 in chart.houses

    def test_sign_fields_are_normalized(self, chart_payload):
        sun = load_chart(chart_payload).planets["Sun"]
        assert sun.sign.name == "Aries"
        assert sun.sign.element == "Fire"
        assert sun.sign.modality == "Cardinal"

    def test_chart_is_immutable(self, chart_payload):
        chart = load_chart(chart_payload)
        with pytest.raises(ValidationError):
            chart.planets["Sun"].house = 2

    def test_bad_house_number(self, chart_payload):
        chart_payload["planets"]["Sun"]["house"] = 13
        with pytest.raises(InvalidChartError):
            load_chart(chart_payload)

    def test_bad_house_key(self, chart_payload):
        chart_payload["houses"]["14"] = chart_payload["houses"]["1"]
        with pytest.raises(InvalidChartError):
            load_chart(chart_payload)

    def test_bad_coordinate_system(self, chart_payload):
        chart_payload["metadata"]["coordinate_system"] = "galactic"
        with pytest.raises(InvalidChartError):
            load_chart(chart_payload)

    def test_missing_metadata(self, chart_payload):
        del chart_payload["metadata"]
        with pytest.raises(InvalidChartError):
            load_chart(chart_payload)


class TestSignInfo:

    def test_degree_must_be_below_30(self):
        with pytest.raises(ValidationError):
            SignInfo(name="Aries", element="Fire", modality="Cardinal", degree=30.0)

    def test_unknown_element(self):
        with pytest.raises(ValidationError):
            SignInfo(name="Aries", element="Aether", modality="Cardinal", degree=1.0)


class TestLoadTransits:

    def test_valid(self):
        transits = load_transits([{"name": "Sun", "longitude": 45.0, "house": 2}])
        assert transits[0].name == "Sun"
        assert transits[0].sign is None

    def test_invalid(self):
        with pytest.raises(InvalidChartError):
            load_transits([{"name": "Sun", "longitude": 400.0, "house": 2}])


class TestTables:

    def test_planet_mapping(self):
        sun = get_planet_mapping("Sun")
        assert sun.base_frequency == 264
        assert sun.energy == 0.8

    def test_mars_uses_e4(self):
        assert get_planet_mapping("Mars").base_frequency == 330

    def test_alias(self):
        assert get_planet_mapping("NorthNode") == get_planet_mapping("North Node")

    def test_unmapped_planet(self):
        assert get_planet_mapping("Vulcan") is None

    def test_sign_index(self):
        assert sign_index("Aries") == 1
        assert sign_index("pisces") == 12
        assert sign_index("Ophiuchus") == 1

    def test_resolve_genre(self):
        assert resolve_genre("Jazz") == "jazz"
        assert resolve_genre("polka") == "ambient"
        assert resolve_genre(None) == "ambient"

    def test_missing_tables_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_tables(tmp_path / "missing.yaml")

    def test_invalid_tables_file(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text("planets: not-a-mapping\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            load_tables(path)

    def test_unread_table_keys_are_rejected(self, tmp_path):
        raw = yaml.safe_load(DEFAULT_TABLES_PATH.read_text(encoding="utf-8"))
        raw["dignities"] = {"rulership": {"tonal_quality": "strong", "volume": 1.0}}
        path = tmp_path / "tables.yaml"
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")
        with pytest.raises(ConfigError):
            load_tables(path)

    def test_shipped_tables_round_trip_through_yaml(self, tmp_path):
        raw = yaml.safe_load(DEFAULT_TABLES_PATH.read_text(encoding="utf-8"))
        path = tmp_path / "tables.yaml"
        path.write_text(yaml.safe_dump(raw), encoding="utf-8")
        tables = load_tables(path)
        assert "dignities" not in type(tables).model_fields
        assert set(tables.aspects["trine"].model_dump()) == {"windows", "harmonic", "interval"}
