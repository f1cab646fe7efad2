import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from recruit_assistant.config import Config, config
from recruit_assistant.errors import MethodError, RecruitAssistantError
from recruit_assistant.logging_config import setup_logging
from recruit_assistant.models import (
    AnalyticsResponse, AnalyticsStats, ChatRequest, ChatResponse,
    ClearAnalyticsResponse, ErrorResponse, QuestionCount,
)
from recruit_assistant.services.analytics_service import AnalyticsService
from recruit_assistant.services.assistant_service import AssistantService
from recruit_assistant.services.chat_service import ChatService
from recruit_assistant.services.response_cache import ResponseCache

VERSION = "1.0.0"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
    "Access-Control-Max-Age": "86400",
}

logger = logging.getLogger(__name__)


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_analytics_service(request: Request) -> AnalyticsService:
    return request.app.state.analytics_service


def create_app(cfg: Config = config, assistant: Optional[AssistantService] = None,
               cache: Optional[ResponseCache] = None,
               analytics: Optional[AnalyticsService] = None) -> FastAPI:
    """Build the API with its services constructed once and owned by the app."""
    assistant = assistant or AssistantService.from_config(cfg)
    cache = cache or ResponseCache(
        max_entries=cfg.CACHE_MAX_ENTRIES,
        ttl_seconds=cfg.CACHE_TTL_SECONDS,
        similarity_threshold=cfg.CACHE_SIMILARITY_THRESHOLD,
    )
    analytics = analytics or AnalyticsService.from_url(
        cfg.REDIS_URL,
        token=cfg.REDIS_TOKEN,
        prefix=cfg.ANALYTICS_PREFIX,
        socket_timeout=cfg.REDIS_SOCKET_TIMEOUT_SECONDS,
        connect_timeout=cfg.REDIS_CONNECT_TIMEOUT_SECONDS,
    )
    chat_service = ChatService(assistant, cache, analytics)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        chat_service.shutdown()

    app = FastAPI(
        title="Recruiting Assistant API",
        description="Recruiting chat assistant with fuzzy response caching and question analytics",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.chat_service = chat_service
    app.state.analytics_service = analytics

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecruitAssistantError)
    async def handle_app_error(request: Request, exc: RecruitAssistantError):
        if exc.status_code < 500:
            body = ErrorResponse(error=exc.details or exc.error)
        else:
            body = ErrorResponse(error=exc.error, details=exc.details)
        return JSONResponse(
            status_code=exc.status_code, content=body.model_dump(exclude_none=True), headers=CORS_HEADERS
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="Invalid request body", details=str(exc.errors())).model_dump(),
            headers=CORS_HEADERS,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(status_code=405, content={"error": MethodError.error}, headers=CORS_HEADERS)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail, "success": False})

    # OPTIONS on any path, routed or not, gets 200 with the CORS headers
    @app.middleware("http")
    async def preflight(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        return await call_next(request)

    @app.post("/chat", response_model=ChatResponse)
    async def chat(body: ChatRequest, service: ChatService = Depends(get_chat_service)):
        """Answer a question, from the cache when a similar one was seen recently"""
        try:
            result = await service.chat(body.message, body.thread_id)
        except RecruitAssistantError:
            raise
        except Exception as e:
            logger.exception("Error in chat handler")
            raise RecruitAssistantError(str(e)) from e

        return ChatResponse(
            reply=result.reply,
            thread_id=result.thread_id,
            scroll_to_form=result.scroll_to_form,
            cached=result.cached,
        )

    @app.get("/analytics", response_model=AnalyticsResponse)
    def get_analytics(service: AnalyticsService = Depends(get_analytics_service)):
        """Most frequently asked questions with totals"""
        stats = service.stats()
        questions = service.top_questions(cfg.ANALYTICS_TOP_N)
        logger.info(
            "Returning %d total questions, %d unique",
            stats["totalQuestions"], stats["uniqueQuestions"],
        )
        return AnalyticsResponse(
            stats=AnalyticsStats(**stats),
            questions=[QuestionCount(**q) for q in questions],
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @app.delete("/analytics", response_model=ClearAnalyticsResponse)
    def clear_analytics(service: AnalyticsService = Depends(get_analytics_service)):
        """Reset all question counters"""
        service.clear()
        logger.info("Analytics cleared")
        return ClearAnalyticsResponse(message="Analytics data cleared")

    @app.get("/health")
    async def health_check(service: ChatService = Depends(get_chat_service)):
        """Health check endpoint"""
        return {"status": "healthy", "version": VERSION, "cache": service.cache.stats()}

    return app


setup_logging(config.LOG_LEVEL)
app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
