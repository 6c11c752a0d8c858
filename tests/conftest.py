import json

import pytest

HEADER = "id,nombre,lat,lng,consejos,distancia,ruta,link"

SCENARIO = "\n".join([
    HEADER,
    "1,Tapalpa,19.95,-103.77,Zona segura,2h,http://r,http://i",
    "2,,20.0,-103.0,x,y,z,w",
    '3,Mazamitla,19.91,-103.03,"Cuidado, lleve agua",1.5h,http://r2,http://i2',
])


@pytest.fixture
def scenario_csv():
    return SCENARIO


@pytest.fixture
def municipalities_geojson(tmp_path):
    square = lambda x, y: {
        "type": "Polygon",
        "coordinates": [[[x, y], [x + 0.5, y], [x + 0.5, y + 0.5], [x, y + 0.5], [x, y]]],
    }
    doc = {
        "type": "FeatureCollection",
        "features": [
            {"type": "Feature", "properties": {"NOMGEO": "Tapalpa", "CVEGEO": "14085"},
             "geometry": square(-104.0, 19.7)},
            {"type": "Feature", "properties": {"NOMGEO": " Mazamitla ", "CVEGEO": "14059"},
             "geometry": square(-103.3, 19.7)},
        ],
    }
    path = tmp_path / "jalisco_municipios.geojson"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path
