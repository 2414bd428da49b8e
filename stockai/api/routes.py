from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from stockai.config.settings import settings
from stockai.errors import HybridResolutionError, InvalidSymbolError
from stockai.schemas.response import ApiStatusSchema, SourceAttribution, StockQuoteResponse
from stockai.services.hybrid_resolver import HybridResolver, describe_source

logger = logging.getLogger(__name__)
router = APIRouter()


@lru_cache
def get_resolver() -> HybridResolver:
    return HybridResolver.build_default(settings)


def error_response(error: str, message: str, status_code: int = 400):
    payload = StockQuoteResponse(
        schema_version=settings.schema_version,
        success=False,
        error=error,
        message=message,
        sources=[],
    )
    return JSONResponse(payload.model_dump(mode="json"), status_code=status_code)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, version=settings.app_version)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get("x-request-id", str(uuid.uuid4()))
        response = None
        start = time.perf_counter()
        try:
            response = await call_next(request)
            return response
        finally:
            latency_ms = round((time.perf_counter() - start) * 1000, 2)
            logger.info(
                "request_complete",
                extra={
                    "request_id": request_id,
                    "path": request.url.path,
                    "symbol": request.query_params.get("symbol", ""),
                    "status_code": response.status_code if response else None,
                    "latency_ms": latency_ms,
                },
            )

    app.include_router(router)
    return app


@router.get("/health")
def health():
    return {"schema_version": settings.schema_version, "status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get("/stock", response_model=StockQuoteResponse)
def stock(symbol: Optional[str] = Query(None), resolver: HybridResolver = Depends(get_resolver)):
    if not symbol:
        return error_response(
            "Missing required parameter: symbol",
            "Please provide a stock symbol as a query parameter",
        )

    try:
        quote = resolver.resolve(symbol)
    except InvalidSymbolError as exc:
        return error_response(str(exc), "Please provide a valid stock symbol")
    except HybridResolutionError as exc:
        return error_response(str(exc), "Failed to fetch stock data from all sources", status_code=exc.status_code)
    except Exception as exc:
        logger.error(f"Unexpected error resolving {symbol}: {type(exc).__name__}", exc_info=True)
        return error_response(
            "Internal server error",
            "An unexpected error occurred while fetching stock data",
            status_code=500,
        )

    sources = [SourceAttribution(source=describe_source(quote), timestamp=datetime.now(timezone.utc))]
    return StockQuoteResponse(schema_version=settings.schema_version, success=True, data=quote, sources=sources)


@router.get("/status", response_model=ApiStatusSchema)
def status(resolver: HybridResolver = Depends(get_resolver)):
    result = resolver.api_status()
    return ApiStatusSchema(
        schema_version=settings.schema_version,
        primary=result.primary,
        secondary=result.secondary,
        recommended_source=result.recommended_source,
    )


@router.get("/metrics")
def all_metrics(resolver: HybridResolver = Depends(get_resolver)):
    output = resolver.metrics.global_metrics()
    output["schema_version"] = settings.schema_version
    return output
