"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from meal_nutrition.api.admin import router as admin_router
from meal_nutrition.api.models import (
    AnalyzeRequest,
    AnalyzeTextRequest,
    FoodPayload,
    FoodSearchHit,
)
from meal_nutrition.app_logging import configure_logging
from meal_nutrition.containers import AppContainer
from meal_nutrition.errors import DatasetUnavailableError
from meal_nutrition.services.confidence import confidence_display


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(logging.DEBUG if container.settings.debug else logging.INFO)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.reference_store.ensure_loaded()
        except DatasetUnavailableError:
            logger.exception("Failed to preload reference dataset")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)

    @app.exception_handler(DatasetUnavailableError)
    async def dataset_unavailable(
        _request: Request, exc: DatasetUnavailableError
    ) -> JSONResponse:
        logger.error("Reference dataset unavailable: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"success": False, "error": "Reference dataset unavailable"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/nutrition/analyze")
    async def analyze(payload: AnalyzeRequest, request: Request) -> dict[str, object]:
        """Analyze a batch of parsed food mentions."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.aggregation_service.process_parsed_foods(
            payload.items
        )
        return result.model_dump(by_alias=True)

    @app.post("/nutrition/analyze-text")
    async def analyze_text(
        payload: AnalyzeTextRequest, request: Request
    ) -> dict[str, object]:
        """Analyze a free-text meal description."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.aggregation_service.analyze_text(payload.text)
        return result.model_dump(by_alias=True)

    @app.get("/foods/search")
    async def search_foods(
        request: Request,
        q: str = Query(min_length=1),
        limit: int = Query(default=10, ge=1, le=50),
        fuzzy: bool = False,
    ) -> dict[str, object]:
        """Search reference foods by partial or fuzzy name."""
        store = request.app.state.container.reference_store
        if fuzzy:
            hits = [
                FoodSearchHit(
                    food=FoodPayload.from_record(candidate.record),
                    similarity=candidate.similarity,
                )
                for candidate in await store.search_by_fuzzy_match(q, limit=limit)
            ]
        else:
            hits = [
                FoodSearchHit(food=FoodPayload.from_record(record))
                for record in await store.search_by_partial_name(q, limit=limit)
            ]
        return {"results": [hit.model_dump() for hit in hits]}

    @app.get("/foods/{food_id}")
    async def get_food(food_id: str, request: Request) -> dict[str, object]:
        """Return a reference food by id."""
        store = request.app.state.container.reference_store
        record = await store.get_by_id(food_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return FoodPayload.from_record(record).model_dump()

    @app.get("/confidence/{score}")
    async def confidence(score: float) -> dict[str, object]:
        """Return tier and display hints for a confidence score."""
        display = confidence_display(score)
        return {
            "level": display.level.value if display.level else None,
            "colorClass": display.color_class,
            "icon": display.icon,
            "message": display.message,
        }

    return app
