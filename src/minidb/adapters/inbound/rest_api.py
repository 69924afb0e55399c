"""REST API adapter for the database engine.

This module provides a FastAPI-based request boundary. It accepts
statement text, runs it through a shared DatabaseEngine and wraps the
result or error in a small envelope.

Endpoints:
    POST /execute - Execute a statement: {"sql": "..."}
    GET /health - Health check
    GET /tables - Registered table names
    GET /stats - Engine statistics

Envelope:
    200 {"success": true, "result": <result>}
    400 {"success": false, "error": "<message>", "error_type": "<kind>"}

Usage:
    from minidb.adapters.inbound.rest_api import create_app
    from minidb.application import DatabaseEngine

    db = DatabaseEngine(data_dir="/path/to/data")
    db.start()

    app = create_app(db)
    # Run with uvicorn: uvicorn app:app --host 0.0.0.0 --port 8000

References:
    - FastAPI documentation: https://fastapi.tiangolo.com/
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from minidb import __version__
from minidb.application import DatabaseEngine
from minidb.domain.errors import MiniDBError
from minidb.infrastructure.logging import get_logger


SQL_REQUIRED = "SQL string required"

logger = get_logger(__name__)


class SQLRequest(BaseModel):
    """Request model for statement execution.

    ``sql`` is loosely typed so that a missing or non-string value gets
    the envelope error instead of a schema error.
    """

    sql: Any = Field(None, description="Statement to execute")


class SQLResponse(BaseModel):
    """Response envelope for statement execution."""

    success: bool = Field(..., description="Whether the statement succeeded")
    result: Any = Field(None, description="Statement result")
    error: str | None = Field(None, description="Error message, unchanged from the engine")
    error_type: str | None = Field(None, description="Error kind")


class TablesResponse(BaseModel):
    """Response model for the table listing."""

    tables: list[str] = Field(default_factory=list, description="Registered table names")


class HealthResponse(BaseModel):
    """Response model for health check."""

    status: str = Field(..., description="Health status")
    version: str = Field(..., description="Engine version")


def _error_response(status_code: int, error: str, error_type: str | None = None) -> JSONResponse:
    body = SQLResponse(success=False, error=error, error_type=error_type)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def create_app(db: DatabaseEngine) -> FastAPI:
    """Create a FastAPI application for the database engine.

    Args:
        db: The (started) database engine to use.

    Returns:
        A configured FastAPI application.
    """
    app = FastAPI(
        title="minidb API",
        description="REST API for executing minidb statements",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(400, SQL_REQUIRED)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(
            status="healthy" if db.is_started else "unhealthy",
            version=__version__,
        )

    @app.get("/tables", response_model=TablesResponse, tags=["Stats"])
    def list_tables() -> TablesResponse:
        """List registered tables."""
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")
        return TablesResponse(tables=db.list_tables())

    @app.get("/stats", tags=["Stats"])
    def get_stats() -> dict[str, Any]:
        """Get engine statistics."""
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")
        return db.get_stats()

    @app.post("/execute", response_model=SQLResponse, tags=["SQL"])
    def execute_sql(request: SQLRequest) -> JSONResponse:
        """Execute a statement.

        Args:
            request: The request containing the statement text.

        Returns:
            The result envelope.
        """
        if not isinstance(request.sql, str) or not request.sql.strip():
            return _error_response(400, SQL_REQUIRED)
        if not db.is_started:
            raise HTTPException(status_code=503, detail="Database not started")

        try:
            result = db.execute(request.sql)
        except MiniDBError as e:
            return _error_response(400, str(e), type(e).__name__)
        except OSError as e:
            logger.error("statement_persist_failed", error=str(e))
            return _error_response(500, str(e), type(e).__name__)

        return JSONResponse(content={"success": True, "result": result})

    return app


def run_server(
    db: DatabaseEngine,
    host: str = "0.0.0.0",
    port: int = 8000,
) -> None:
    """Run the REST API server.

    Args:
        db: The database engine.
        host: Host to bind to.
        port: Port to bind to.
    """
    import uvicorn

    app = create_app(db)
    uvicorn.run(app, host=host, port=port)
