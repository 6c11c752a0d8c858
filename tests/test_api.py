import matplotlib

matplotlib.use("Agg")

from fastapi.testclient import TestClient

from jalisco_turismo.config import Settings
from jalisco_turismo.downloader import FetchError
from jalisco_turismo.geojson_parser import parse_municipalities
from jalisco_turismo.loader import RecordLoader
from jalisco_turismo.main import create_app, load_map_layers
from jalisco_turismo.records import Record
from jalisco_turismo.router import MapLayers


def record(name):
    return Record(id="", name=name, latitude=20.0, longitude=-103.0)


class ScriptedSource:
    """Returns the queued batches in order; exceptions are raised."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def __call__(self):
        self.calls += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def client_for(source, layers=None):
    app = create_app(settings=Settings(), loader=RecordLoader(source), layers=layers or MapLayers())
    return TestClient(app)


def test_root():
    response = client_for(ScriptedSource()).get("/")
    assert response.status_code == 200
    assert "Pueblos Mágicos" in response.json()["message"]


def test_records_triggers_first_load():
    source = ScriptedSource([record("Tapalpa"), record("Tequila")])
    client = client_for(source)
    body = client.get("/records").json()
    assert body["generation"] == 1
    assert body["count"] == 2
    assert body["records"][0]["name"] == "Tapalpa"
    assert body["records"][0]["route_url"] == ""
    # Served from the published snapshot afterwards.
    assert client.get("/records").json()["generation"] == 1
    assert source.calls == 1


def test_reload_replaces_records():
    client = client_for(ScriptedSource([record("Tapalpa")], [record("Mascota")]))
    assert client.post("/reload").json() == {"generation": 1, "count": 1}
    assert client.post("/reload").json() == {"generation": 2, "count": 1}
    assert client.get("/records").json()["records"][0]["name"] == "Mascota"


def test_fetch_failure_is_bad_gateway_and_keeps_records():
    client = client_for(ScriptedSource([record("Tapalpa")], FetchError("HTTP 500")))
    client.post("/reload")
    response = client.post("/reload")
    assert response.status_code == 502
    assert "HTTP 500" in response.json()["detail"]
    assert client.get("/records").json()["records"][0]["name"] == "Tapalpa"


def test_unexpected_failure_is_internal_error():
    response = client_for(ScriptedSource(ValueError("roto"))).get("/records")
    assert response.status_code == 500


def test_map(municipalities_geojson):
    layers = MapLayers(municipalities=parse_municipalities(str(municipalities_geojson)))
    response = client_for(ScriptedSource([record("Tapalpa")]), layers).get("/map")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "Tapalpa" in response.text


def test_preview_png(municipalities_geojson):
    layers = MapLayers(municipalities=parse_municipalities(str(municipalities_geojson)))
    response = client_for(ScriptedSource([record("Tapalpa")]), layers).get("/preview.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")


def test_preview_without_data_is_not_found():
    response = client_for(ScriptedSource([])).get("/preview.png")
    assert response.status_code == 404


def test_load_map_layers(tmp_path, municipalities_geojson):
    (tmp_path / "municipios_info.json").write_text(
        '{"municipios": {"Tapalpa": {"distancia_km": 130, "tiempo_horas": 2, "tiempo_minutos": 120}}}',
        encoding="utf-8",
    )
    (tmp_path / "recomendaciones.json").write_text(
        '{"recomendaciones": {"Tapalpa": "Viaje de día"}}',
        encoding="utf-8",
    )
    layers = load_map_layers(Settings(data_dir=str(municipalities_geojson.parent)))
    assert layers.municipalities["name"].tolist() == ["Tapalpa", "Mazamitla"]
    assert layers.info["Tapalpa"].distance_km == "130"
    assert layers.advisories == {"Tapalpa": "Viaje de día"}


def test_load_map_layers_missing_files(tmp_path):
    layers = load_map_layers(Settings(data_dir=str(tmp_path / "vacío")))
    assert layers.municipalities is None
    assert layers.info == {}
    assert layers.advisories == {}
