from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mindyamsanzi.api.v1.api import api_router
from mindyamsanzi.core.config import Settings, get_settings, validate_settings
from mindyamsanzi.core.database import Database
from mindyamsanzi.core.exceptions import MindYaMsanziException
from mindyamsanzi.services.ai_gateway import AIGateway, GatewayConfig
from mindyamsanzi.services.counselor_service import CounselorService
from mindyamsanzi.services.directory_service import DirectoryService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database: Optional[Database] = app.state.database

    if database is not None:
        if settings.AUTO_CREATE_TABLES:
            await database.init_db()
        if settings.SEED_DIRECTORY:
            async with database.session() as session:
                await DirectoryService(session).seed_directory()

    logger.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield

    if database is not None:
        await database.dispose()


async def handle_app_exception(request: Request, exc: MindYaMsanziException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


def create_app(settings: Optional[Settings] = None, gateway: Optional[AIGateway] = None) -> FastAPI:
    """Build the API around one validated settings object"""
    settings = validate_settings(settings or get_settings())

    database = Database(settings.DATABASE_URL, echo=settings.DEBUG) if settings.persistence_enabled else None
    gateway = gateway or AIGateway(GatewayConfig.from_settings(settings))

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.counselor = CounselorService(settings, gateway, database)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_HOSTS,
        allow_credentials=False,
        allow_methods=["POST", "OPTIONS", "GET", "PATCH"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )
    app.add_exception_handler(MindYaMsanziException, handle_app_exception)

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "version": settings.APP_VERSION,
            "persistence": database is not None,
        }

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings)
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
