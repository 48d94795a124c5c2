from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from datetime import datetime
import logging

# Load environment variables as early as possible
load_dotenv()

from .config import settings
from .dependencies import get_screen_registry, reset_screen_registry
from .infrastructure.screens.memory_screen_registry import InMemoryScreenRegistry
from .exceptions import ScreenError, http_exception_handler, screen_exception_handler
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, SecurityMiddleware, RequestSizeLimitMiddleware
from .routers import screen_router
from .schemas.common.common import HealthResponse

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    if not settings.GEMINI_API_KEY:
        logger.warning("GEMINI_API_KEY is empty; generation requests will fail")
    yield
    # Shutdown: cancel outstanding requests of every open screen
    logger.info(f"Shutting down {settings.APP_NAME}...")
    reset_screen_registry()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(ScreenError, screen_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=settings.GZIP_MIN_SIZE)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(screen_router.router)

    @app.get("/health", response_model=HealthResponse)
    def health_check(registry: InMemoryScreenRegistry = Depends(get_screen_registry)):
        return HealthResponse(
            status="healthy",
            service=settings.APP_NAME,
            version=settings.APP_VERSION,
            timestamp=datetime.utcnow().isoformat(),
            active_screens=len(registry),
            gemini_configured=bool(settings.GEMINI_API_KEY),
            gemini_model=settings.GEMINI_MODEL,
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "gemrag.main:app",
        host=settings.HOST,
        port=settings.PORT,
        workers=1,  # screens live in process memory
        log_level=settings.LOG_LEVEL.lower()
    )
