"""
router.py
---------

Rutas HTTP expuestas por la API de ``jalisco_turismo``.

``GET /records`` devuelve los registros turísticos vigentes en JSON,
``POST /reload`` vuelve a descargar y procesar la fuente de datos y
``GET /map`` entrega el mapa interactivo en HTML y ``GET /preview.png`` una
vista estática del mismo en PNG.  El cargador de registros y las capas del
mapa viven en ``app.state`` y se obtienen mediante dependencias, lo que
permite sustituirlos en las pruebas.

Los errores de la fuente de datos se traducen a códigos HTTP coherentes:
una descarga fallida es un ``502``, cualquier otro fallo un ``500``.
"""

from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import geopandas as gpd
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse, Response
from pydantic import BaseModel, Field

from .downloader import FetchError
from .loader import RecordLoader, Snapshot
from .map_builder import build_map, render_html
from .preview import render_preview
from .records import MunicipalityInfo

logger = logging.getLogger(__name__)

class RecordModel(BaseModel):
    """Esquema de un registro turístico tal como se publica en la API."""

    id: str
    name: str
    latitude: float
    longitude: float
    advisory_text: str = ""
    travel_summary: str = ""
    route_url: str = ""
    info_url: str = ""
    municipality: str = ""

class RecordsResponse(BaseModel):
    generation: int = Field(..., description="Número de la recarga que produjo los registros")
    count: int
    records: List[RecordModel]

class ReloadResponse(BaseModel):
    generation: int
    count: int

@dataclass
class MapLayers:
    """Capas auxiliares del mapa: polígonos e información por municipio."""

    municipalities: Optional[gpd.GeoDataFrame] = None
    info: Dict[str, MunicipalityInfo] = field(default_factory=dict)
    advisories: Dict[str, str] = field(default_factory=dict)

def get_loader(request: Request) -> RecordLoader:
    return request.app.state.loader

def get_layers(request: Request) -> MapLayers:
    return getattr(request.app.state, "layers", None) or MapLayers()

def _reload(loader: RecordLoader) -> Snapshot:
    """Ejecuta una recarga y convierte sus errores en ``HTTPException``."""
    try:
        return loader.reload()
    except FetchError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"No fue posible descargar los datos: {exc}",
        ) from exc
    except Exception as exc:
        logger.exception("Error inesperado al recargar los datos: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Ocurrió un error interno al procesar los datos.",
        ) from exc

def _current(loader: RecordLoader) -> Snapshot:
    # La primera consulta dispara la carga inicial, como al abrir la página.
    snapshot = loader.snapshot
    if snapshot.generation == 0:
        snapshot = _reload(loader)
    return snapshot

api_router = APIRouter(prefix="", tags=["pueblos"])

@api_router.get(
    "/records",
    response_model=RecordsResponse,
    summary="Registros turísticos vigentes",
)
def records_endpoint(loader: RecordLoader = Depends(get_loader)) -> RecordsResponse:
    snapshot = _current(loader)
    return RecordsResponse(
        generation=snapshot.generation,
        count=len(snapshot.records),
        records=[RecordModel(**r.to_dict()) for r in snapshot.records],
    )

@api_router.post(
    "/reload",
    response_model=ReloadResponse,
    summary="Volver a descargar y procesar la fuente de datos",
)
def reload_endpoint(loader: RecordLoader = Depends(get_loader)) -> ReloadResponse:
    """Recarga los registros.

    Si otra recarga más reciente terminó antes, se devuelve su resultado.
    Un fallo deja intactos los registros publicados.
    """
    snapshot = _reload(loader)
    return ReloadResponse(generation=snapshot.generation, count=len(snapshot.records))

@api_router.get("/map", response_class=HTMLResponse, summary="Mapa interactivo")
def map_endpoint(
    loader: RecordLoader = Depends(get_loader),
    layers: MapLayers = Depends(get_layers),
) -> HTMLResponse:
    snapshot = _current(loader)
    fmap = build_map(
        snapshot.records,
        municipalities=layers.municipalities,
        municipality_info=layers.info,
        advisories=layers.advisories,
    )
    return HTMLResponse(content=render_html(fmap))

@api_router.get(
    "/preview.png",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
    summary="Vista estática del mapa",
)
def preview_endpoint(
    loader: RecordLoader = Depends(get_loader),
    layers: MapLayers = Depends(get_layers),
) -> Response:
    """Dibuja los pueblos sobre los municipios y devuelve la imagen PNG.

    Responde ``404`` si no hay pueblos ni municipios que dibujar.
    """
    snapshot = _current(loader)
    with tempfile.TemporaryDirectory() as tmp_dir:
        try:
            result = render_preview(
                snapshot.records,
                municipalities=layers.municipalities,
                output_path=str(Path(tmp_dir) / "preview.png"),
            )
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
        content = Path(result["image"]).read_bytes()
    return Response(content=content, media_type="image/png")

__all__ = ["api_router", "get_loader", "get_layers", "MapLayers"]
