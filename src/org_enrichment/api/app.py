"""FastAPI application exposing GET /metadata."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse

from org_enrichment.adapters.extractor import HtmlMetadataExtractor
from org_enrichment.config import Settings, get_settings
from org_enrichment.core import InvalidUrlError, MetadataCache
from org_enrichment.use_cases import MetadataLookupService, build_fallbacks

router = APIRouter()


def build_lookup_service(settings: Settings) -> MetadataLookupService:
    """Wire the extractor, cache and fallbacks from settings."""
    fallbacks = build_fallbacks(settings)
    return MetadataLookupService(
        extractor=HtmlMetadataExtractor(config=settings.extractor, fallbacks=fallbacks),
        cache=MetadataCache(ttl_ms=settings.cache_ttl_ms),
        fallbacks=fallbacks,
    )


@router.get("/metadata")
async def get_metadata(request: Request, url: Optional[str] = Query(None)) -> JSONResponse:
    """Metadata for a website. Always 200 unless the url parameter is missing or malformed."""
    if not url:
        return JSONResponse(status_code=400, content={"error": "URL parameter is required"})

    service: MetadataLookupService = request.app.state.lookup_service
    try:
        record = await service.lookup(url)
    except InvalidUrlError:
        return JSONResponse(status_code=400, content={"error": "Invalid URL format"})

    return JSONResponse(content=record.to_dict())


@router.get("/health")
async def health_check(request: Request) -> dict:
    service: MetadataLookupService = request.app.state.lookup_service
    return {"status": "ok", "cached": len(service.cache)}


def create_app(
    settings: Optional[Settings] = None,
    lookup_service: Optional[MetadataLookupService] = None,
) -> FastAPI:
    """Create the API app. A lookup service can be injected for tests."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        print(f"Starting metadata enrichment API on {settings.server.host}:{settings.server.port}...")
        yield
        print("Shutting down metadata enrichment API...")

    app = FastAPI(
        title="Organization Metadata Enrichment",
        description="Website metadata lookups for the climate organization directory",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.lookup_service = lookup_service or build_lookup_service(settings)
    app.include_router(router)
    return app
