from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import logging

from pipelines.service import DocsService, MAX_SEARCH_LIMIT
from sources.errors import (
    AuthenticationRequiredError,
    DocSourceError,
    DocumentNotFoundError,
    SourceTransportError,
    UnknownSourceKindError
)
from observability.prometheus_metrics import setup_prometheus_metrics

logger = logging.getLogger(__name__)


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, description="Free-text query")
    limit: int = Field(default=5, ge=1, le=MAX_SEARCH_LIMIT, description="Maximum results")


class SearchHit(BaseModel):
    topic: str
    title: str
    category: str
    excerpt: str
    score: float


class SearchResponse(BaseModel):
    query: str
    results: List[SearchHit]


class TopicInfo(BaseModel):
    topic: str
    title: str
    description: str
    category: str
    priority: float
    source_type: str


class DocumentResponse(BaseModel):
    topic: str
    title: str
    category: str
    source_type: str
    content: str


def _status_for(error: DocSourceError) -> int:
    if isinstance(error, DocumentNotFoundError):
        return 404
    if isinstance(error, AuthenticationRequiredError):
        return 401
    if isinstance(error, SourceTransportError):
        return 502
    if isinstance(error, UnknownSourceKindError):
        return 500
    return 400


def create_app(service: Optional[DocsService] = None) -> FastAPI:
    """Build the HTTP API around ``service`` (built from the environment when omitted)."""
    app = FastAPI(title="orgdocs API", version="1.0.0")
    app.state.service = service
    setup_prometheus_metrics(app)

    @app.on_event("startup")
    async def startup_event():
        if app.state.service is None:
            app.state.service = DocsService.from_settings()
            app.state.owns_service = True
            logger.info("Docs service initialized")

    @app.on_event("shutdown")
    async def shutdown_event():
        if getattr(app.state, "owns_service", False):
            await app.state.service.close()
            logger.info("Docs service closed")

    @app.exception_handler(DocSourceError)
    async def doc_source_error_handler(request: Request, exc: DocSourceError):
        return JSONResponse(status_code=_status_for(exc), content={"detail": str(exc)})

    def get_service() -> DocsService:
        if app.state.service is None:
            raise HTTPException(status_code=503, detail="Service not initialized")
        return app.state.service

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/health/sources")
    async def health_sources() -> Dict[str, bool]:
        return await get_service().check_health()

    @app.get("/topics", response_model=List[TopicInfo])
    async def topics(category: Optional[str] = None):
        service = get_service()
        try:
            descriptors = service.catalog.by_category(category) if category else service.catalog.all()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return [
            TopicInfo(
                topic=d.topic,
                title=d.title,
                description=d.description,
                category=d.category,
                priority=d.priority,
                source_type=d.source.type
            )
            for d in descriptors
        ]

    @app.get("/documents/{topic}", response_model=DocumentResponse)
    async def get_doc(topic: str):
        doc = await get_service().get_doc(topic)
        return DocumentResponse(
            topic=doc.descriptor.topic,
            title=doc.descriptor.title,
            category=doc.descriptor.category,
            source_type=doc.descriptor.source.type,
            content=doc.content
        )

    @app.post("/search", response_model=SearchResponse)
    async def search(request: SearchRequest):
        if not request.query.strip():
            raise HTTPException(status_code=400, detail="Query must not be blank")
        results = await get_service().search(request.query, request.limit)
        return SearchResponse(
            query=request.query,
            results=[SearchHit(**r.to_dict()) for r in results]
        )

    return app
