"""FastAPI application - pgscope table inspection service.

This service READS the database catalog. It never truncates or deletes;
the truncate endpoint only simulates the foreign key impact.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .api_models import (
    ColumnModel,
    ForeignKeyModel,
    HealthResponse,
    ImpactNodeModel,
    SimulateTruncateRequest,
    SimulateTruncateResponse,
    SuppressedEdgeModel,
    TableCountModel,
    TableDetailsResponse,
    TableListEntryModel,
)
from .cache.snapshot import SnapshotCache, SnapshotError
from .catalog.adapter import CatalogConnectionError, CatalogQueryError, PostgresCatalogAdapter
from .catalog.db import DatabaseManager
from .catalog.identifiers import MalformedIdentifierError
from .config import Config
from .service import InspectorService, NotFoundError, SimulationTimeoutError


logger = logging.getLogger(__name__)


# Global service instance (initialized in lifespan)
_service: InspectorService | None = None
_db: DatabaseManager | None = None


def _require_service() -> InspectorService:
    if not _service:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    global _service, _db

    logger.info("Starting pgscope service...")

    config = Config.load()

    _db = DatabaseManager(config.database)
    pool = await _db.connect()

    _service = InspectorService(
        adapter=PostgresCatalogAdapter(pool),
        cache=SnapshotCache(
            directory=config.cache.directory,
            enabled=config.cache.enabled,
        ),
        config=config,
    )

    logger.info("pgscope service started")

    yield

    logger.info("Shutting down pgscope service...")
    await _db.close()
    _service = None
    logger.info("pgscope service stopped")


app = FastAPI(
    title="pgscope",
    description="Table row counts, foreign keys, and truncate impact simulation for PostgreSQL.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(MalformedIdentifierError)
async def malformed_identifier_handler(request: Request, exc: MalformedIdentifierError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid table name", "detail": str(exc)},
    )


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=404,
        content={"error": "Not found", "detail": str(exc)},
    )


@app.exception_handler(SimulationTimeoutError)
async def simulation_timeout_handler(request: Request, exc: SimulationTimeoutError):
    return JSONResponse(
        status_code=504,
        content={"error": "Simulation timed out", "detail": str(exc)},
    )


@app.exception_handler(CatalogQueryError)
async def catalog_error_handler(request: Request, exc: CatalogQueryError):
    logger.error(f"Catalog error on {request.url.path}: {exc}")
    if isinstance(exc, CatalogConnectionError):
        return JSONResponse(
            status_code=503,
            content={"error": "Database unavailable", "detail": str(exc)},
        )
    return JSONResponse(
        status_code=500,
        content={"error": "Catalog query failed", "detail": str(exc)},
    )


@app.exception_handler(SnapshotError)
async def snapshot_error_handler(request: Request, exc: SnapshotError):
    logger.error(f"Snapshot error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Cache error", "detail": str(exc)},
    )


@app.get("/health", response_model=HealthResponse)
async def health():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if _service else "starting",
        database=_db.stats if _db else {"connected": False},
        cache=_service.cache.stats if _service else {},
    )


@app.get("/api/table-counts", response_model=list[TableCountModel])
async def table_counts(
    refresh: bool = Query(False, description="Ignore the cached snapshot"),
):
    """Row count of every base table, largest first."""
    service = _require_service()
    counts = await service.table_counts(refresh=refresh)
    return [TableCountModel(**c.to_dict()) for c in counts]


@app.get("/api/tables-list", response_model=list[TableListEntryModel])
async def tables_list():
    """Cached list of tables (empty until table counts have been fetched)."""
    service = _require_service()
    entries = await service.tables_list()
    return [TableListEntryModel(**e.to_dict()) for e in entries]


@app.get("/api/foreign-keys", response_model=list[ForeignKeyModel])
async def foreign_keys(
    refresh: bool = Query(False, description="Ignore the cached snapshot"),
):
    """Every foreign key constraint outside system schemas."""
    service = _require_service()
    rows = await service.foreign_keys(refresh=refresh)
    return [ForeignKeyModel(**row.to_dict()) for row in rows]


@app.post(
    "/api/simulate-truncate",
    response_model=SimulateTruncateResponse,
    response_model_exclude_none=True,
)
async def simulate_truncate(body: SimulateTruncateRequest):
    """
    Simulate truncating a table.

    Returns every table reachable through foreign keys, in walk order, with
    its level and the constraint that pulled it in. Nothing is modified.
    """
    service = _require_service()
    report = await service.simulate_truncate(body.tableName, body.schemaName)
    return SimulateTruncateResponse(
        affectedTables=[ImpactNodeModel(**node.to_dict()) for node in report.nodes],
        suppressedEdges=[SuppressedEdgeModel(**edge.to_dict()) for edge in report.suppressed_edges],
    )


@app.get("/api/table-details/{schema}/{table}", response_model=TableDetailsResponse)
async def table_details(schema: str, table: str):
    """Row count and columns for one table."""
    service = _require_service()
    details = await service.table_details(schema, table)
    return TableDetailsResponse(
        count=details.count,
        columns=[ColumnModel(**c.to_dict()) for c in details.columns],
    )


@app.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "pgscope",
        "version": "0.1.0",
        "description": "Inspects PostgreSQL tables and simulates truncate impact. Read-only.",
        "endpoints": {
            "/api/table-counts": "Row counts per table (?refresh=true to bypass cache)",
            "/api/tables-list": "Cached table list",
            "/api/foreign-keys": "Foreign key constraints (?refresh=true to bypass cache)",
            "/api/simulate-truncate": "POST - Tables affected by truncating a table",
            "/api/table-details/{schema}/{table}": "Row count and columns",
            "/health": "Health check",
        },
    }


def run():
    """Run the service with uvicorn."""
    import uvicorn

    config = Config.load()
    logging.basicConfig(
        level=config.logging.level,
        format=config.logging.format,
    )

    uvicorn.run(
        "pgscope_svc.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=config.server.reload,
    )


if __name__ == "__main__":
    run()
