from pathlib import Path

import pytest

from jalisco_turismo.config import DEFAULT_SHEET_ID, load_settings


def test_defaults():
    settings = load_settings({})
    assert settings.source == "sheet"
    assert DEFAULT_SHEET_ID in settings.sheet_url
    assert settings.sheet_url.endswith("export?format=csv&gid=0")
    assert settings.fetch_timeout == 15.0
    assert settings.geojson_path == Path("data") / "jalisco_municipios.geojson"
    assert settings.advisories_path == Path("data") / "recomendaciones.json"


def test_overrides():
    settings = load_settings({
        "JALISCO_SOURCE": " CSV ",
        "JALISCO_CSV_PATH": "/tmp/pueblos.csv",
        "JALISCO_DATA_DIR": "/srv/datos",
        "JALISCO_FETCH_TIMEOUT": "4.5",
    })
    assert settings.source == "csv"
    assert settings.csv_path == "/tmp/pueblos.csv"
    assert settings.pueblos_path == Path("/srv/datos/pueblos_magicos.json")
    assert settings.fetch_timeout == 4.5


@pytest.mark.parametrize("env", [
    {"JALISCO_SOURCE": "excel"},
    {"JALISCO_FETCH_TIMEOUT": "rápido"},
    {"JALISCO_FETCH_TIMEOUT": "0"},
])
def test_invalid_values(env):
    with pytest.raises(ValueError):
        load_settings(env)
