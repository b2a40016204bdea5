"""
FastAPI Application - REST API for match play.

Endpoints:
    GET    /health                          Health check
    GET    /api/v1/cards                    List catalog cards
    POST   /api/v1/decks/import             Import a master-vault deck
    POST   /api/v1/matches                  Create a match
    GET    /api/v1/matches                  List active matches
    GET    /api/v1/matches/{id}             Get match state
    DELETE /api/v1/matches/{id}             End a match
    POST   /api/v1/matches/{id}/actions     Dispatch an action
    GET    /api/v1/matches/{id}/history     Dispatched actions

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated
import logging
import os

from ..catalog import CatalogError

# Environment configuration
KEYSMITH_ENV = os.getenv("KEYSMITH_ENV", "development")
KEYSMITH_LOG_LEVEL = os.getenv("KEYSMITH_LOG_LEVEL", "WARNING")
KEYSMITH_CATALOG = os.getenv("KEYSMITH_CATALOG", None)
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, Body, Query, Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import JSONResponse

    from ..catalog import load_catalog
    from .service import APIService, ServiceError
    from .schemas import (
        # Request models
        CreateMatchRequest,
        ActionRequest,
        # Response models
        HealthResponse,
        CardListResponse,
        DeckResponse,
        MatchResponse,
        MatchListResponse,
        EndMatchResponse,
        ActionResponse,
        HistoryResponse,
        ErrorResponse,
        # Enums
        ErrorCode,
    )

    logging.basicConfig(level=KEYSMITH_LOG_LEVEL.upper())

    app = FastAPI(
        title="Keysmith API",
        description="""
Two-player card game rules engine.

Create a match from two decks, then dispatch actions against it. Every
action either applies fully or leaves the match unchanged.

## Error Codes

| Code | Description |
|------|-------------|
| `CARD_NOT_FOUND` | Card is not where the action expects it |
| `PLAYER_NOT_FOUND` | Player is not in the match |
| `INVALID_TARGET` | Card cannot take part in the action |
| `MATCH_NOT_FOUND` | Match does not exist |
| `UNKNOWN_CARD` | Deck references a card missing from the catalog |
| `VALIDATION_ERROR` | Request failed validation |
| `INTERNAL_ERROR` | A card script failed; match rolled back |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    if service is None:
        catalog = load_catalog(KEYSMITH_CATALOG)
        service = APIService(catalog=catalog, environment=KEYSMITH_ENV)
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: dict | None = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        return make_error_response(exc.error_code, str(exc), exc.status_code, exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": [str(err.get("loc")) for err in exc.errors()]},
        )

    # =========================================================================
    # Cards and decks
    # =========================================================================

    @app.get(
        "/api/v1/cards",
        response_model=CardListResponse,
        tags=["Cards"],
        summary="List catalog cards",
    )
    async def list_cards() -> CardListResponse:
        return api_service.list_cards()

    @app.post(
        "/api/v1/decks/import",
        response_model=DeckResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Cards"],
        summary="Import a master-vault deck document",
    )
    async def import_deck(payload: Annotated[dict, Body(description="Deck document")]) -> DeckResponse:
        """
        Import a deck. Its cards join the catalog and can then be used by id
        when creating matches.
        """
        return api_service.import_deck(payload)

    # =========================================================================
    # Match Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/matches",
        response_model=MatchResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown cards in a deck"}},
        tags=["Matches"],
        summary="Create a new match",
    )
    async def create_match(request: CreateMatchRequest) -> MatchResponse:
        return api_service.create_match(request)

    @app.get(
        "/api/v1/matches",
        response_model=MatchListResponse,
        tags=["Matches"],
        summary="List active matches",
    )
    async def list_matches() -> MatchListResponse:
        return api_service.list_matches()

    @app.get(
        "/api/v1/matches/{match_id}",
        response_model=MatchResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Matches"],
        summary="Get match state",
    )
    async def get_match(match_id: str) -> MatchResponse:
        return api_service.get_match(match_id)

    @app.delete(
        "/api/v1/matches/{match_id}",
        response_model=EndMatchResponse,
        tags=["Matches"],
        summary="End a match",
    )
    async def end_match(
        match_id: str,
        reason: Annotated[str, Query(description="Reason for ending")] = "finished",
    ) -> EndMatchResponse:
        """End a match and release its state."""
        return api_service.end_match(match_id, reason)

    @app.post(
        "/api/v1/matches/{match_id}/actions",
        response_model=ActionResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse, "description": "Match, card or player not found"},
            500: {"model": ErrorResponse, "description": "Card script failed"},
        },
        tags=["Game Loop"],
        summary="Dispatch an action",
    )
    async def dispatch_action(match_id: str, request: ActionRequest) -> ActionResponse:
        """
        Apply one action to the match.

        On failure the match state is exactly what it was before the call.
        """
        return api_service.apply_action(match_id, request)

    @app.get(
        "/api/v1/matches/{match_id}/history",
        response_model=HistoryResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="List dispatched actions",
    )
    async def get_history(match_id: str) -> HistoryResponse:
        return api_service.history(match_id)

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return api_service.health()

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Keysmith API",
            "version": "1.0.0",
            "docs": "/api/docs",
            "health": "/health",
        }

    logger.info("Keysmith API ready (%s, %d cards)", KEYSMITH_ENV, len(api_service.catalog))
    return app


# For running directly: uvicorn keysmith.api.app:app
app = None
try:
    app = create_app()
except CatalogError as e:
    # Bad KEYSMITH_CATALOG; the module stays importable
    logger.error("Keysmith API not created: %s", e)
