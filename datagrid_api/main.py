from __future__ import annotations

import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from datagrid.data import GridData, load_grid_data
from datagrid.engine import compute_facet, compute_grid, sorted_rows
from datagrid.errors import InvalidConfiguration
from datagrid.pagination import ELLIPSIS, page_window
from datagrid.state import (
    DEFAULT_WINDOW_RADIUS,
    PAGE_SIZE_OPTIONS,
    ViewState,
    default_view_state,
    normalize_view_state,
    state_to_dict,
    visible_columns,
)
from datagrid_api.schemas import MetaColumnsResponse, PageWindowResponse, ViewStateModel


app = FastAPI(title="Data Grid API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_grid_data() -> GridData:
    return load_grid_data()


def _state_from_model(model: ViewStateModel, data: GridData) -> ViewState:
    return normalize_view_state(model.model_dump(), data.columns)


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/meta/columns", response_model=MetaColumnsResponse)
def meta_columns():
    try:
        data = get_grid_data()
        columns = [
            {
                "id": c.id,
                "header": c.label,
                "kind": c.kind,
                "fuzzy": c.fuzzy,
                "filterable": c.filterable,
                "sortable": c.sortable,
                "visible": c.visible,
                "facet_scope": c.facet_scope,
            }
            for c in data.columns
        ]
        return _json(
            {
                "columns": columns,
                "default_state": state_to_dict(default_view_state(data.columns)),
                "page_size_options": list(PAGE_SIZE_OPTIONS),
            }
        )
    except Exception as exc:
        logger.exception("meta_columns failed")
        return _error(exc, 500)


@app.post("/grid")
def grid(state: ViewStateModel, radius: int = Query(default=DEFAULT_WINDOW_RADIUS)):
    try:
        data = get_grid_data()
        return _json(compute_grid(_state_from_model(state, data), data, radius=radius))
    except InvalidConfiguration as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("grid failed")
        return _error(exc, 500)


@app.post("/facets/{column_id}")
def facets(column_id: str, state: ViewStateModel):
    try:
        data = get_grid_data()
        facet = compute_facet(data, _state_from_model(state, data), column_id)
        return _json(
            {
                "column_id": facet.column_id,
                "kind": facet.kind,
                "unique_values": facet.unique_values,
                "counts": [{"value": k, "count": v} for k, v in facet.counts.items()],
                "min_max": list(facet.min_max) if facet.min_max is not None else None,
            }
        )
    except InvalidConfiguration as exc:
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("facets failed")
        return _error(exc, 500)


@app.get("/page-window", response_model=PageWindowResponse)
def get_page_window(
    current_page: int = Query(default=1),
    total_pages: int = Query(default=0),
    radius: int = Query(default=DEFAULT_WINDOW_RADIUS),
):
    try:
        return _json({"window": page_window(current_page, total_pages, radius), "ellipsis": ELLIPSIS})
    except InvalidConfiguration as exc:
        return _error(exc, 400)


@app.post("/export")
def export_rows(state: ViewStateModel):
    try:
        data = get_grid_data()
        view = _state_from_model(state, data)
        rows = sorted_rows(data, view)
        export_df = rows[[c.id for c in visible_columns(data.columns, view)]]
    except InvalidConfiguration as exc:
        return _error(exc, 400)
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=grid.csv"})
