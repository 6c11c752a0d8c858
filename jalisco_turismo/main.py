"""
main.py
---------

Punto de entrada de la API de ``jalisco_turismo``.
Este módulo crea la aplicación FastAPI, prepara el cargador de registros
según la configuración del entorno y conecta las rutas de ``router.py``.

Para levantar el servicio basta con ``uvicorn`` u otro servidor ASGI:

    uvicorn jalisco_turismo.main:app --reload
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .config import Settings, load_settings
from .geojson_parser import parse_municipalities
from .json_parser import read_municipios_json, read_recomendaciones_json
from .loader import RecordLoader, source_from_settings
from .router import MapLayers, api_router

logger = logging.getLogger(__name__)


def load_map_layers(settings: Settings) -> MapLayers:
    """Lee las capas auxiliares del directorio de datos, si existen.

    Los archivos ausentes simplemente dejan la capa vacía; el mapa sigue
    mostrando los marcadores.
    """
    layers = MapLayers()
    if settings.geojson_path.is_file():
        layers.municipalities = parse_municipalities(str(settings.geojson_path))
        logger.info("Cargados %d municipios", len(layers.municipalities))
    if settings.municipios_path.is_file():
        layers.info = read_municipios_json(str(settings.municipios_path))
    if settings.advisories_path.is_file():
        layers.advisories = read_recomendaciones_json(str(settings.advisories_path))
    return layers


def create_app(
    settings: Optional[Settings] = None,
    loader: Optional[RecordLoader] = None,
    layers: Optional[MapLayers] = None,
) -> FastAPI:
    """Crea y configura la aplicación FastAPI.

    :param settings: configuración; por defecto se lee del entorno.
    :param loader: cargador de registros ya construido (útil en pruebas).
    :param layers: capas auxiliares del mapa ya leídas.
    :returns: una instancia de :class:`~fastapi.FastAPI` lista para servirse.
    """
    settings = settings or load_settings()
    app = FastAPI(
        title="Pueblos Mágicos de Jalisco",
        description=(
            "Mapa interactivo de los municipios y Pueblos Mágicos de Jalisco. "
            "Publica los registros turísticos obtenidos de la hoja de cálculo "
            "o de los archivos JSON y el mapa generado a partir de ellos."
        ),
        version="0.1",
    )
    app.state.settings = settings
    app.state.loader = loader or RecordLoader(source_from_settings(settings))
    app.state.layers = layers if layers is not None else load_map_layers(settings)

    app.include_router(api_router)

    @app.get("/", summary="Raíz de la API", tags=["root"])
    async def root() -> dict[str, str]:
        return {
            "message": (
                "Bienvenido a la API de Pueblos Mágicos de Jalisco. Consulte "
                "GET /records, GET /map, GET /preview.png o POST /reload."
            )
        }

    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
