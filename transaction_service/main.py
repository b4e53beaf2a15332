# main.py
import logging
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from transaction_service import __version__
from transaction_service.api.endpoints import router as api_router
from transaction_service.config import Settings
from transaction_service.database import MongoConnection
from transaction_service.errors import ServiceError, StorageError
from transaction_service.logging_config import configure_logging, get_log_config
from transaction_service.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)


def create_app(settings=None, collection=None):
    """Build the FastAPI app.

    With ``collection`` given, the app uses it as-is and never opens its own
    MongoDB client; otherwise the client is created and pinged on startup.
    """
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Transaction Service",
        description="Create, read and update transactions stored in MongoDB",
        version=__version__,
    )
    app.state.settings = settings
    app.state.mongo = None
    app.state.transaction_service = (
        TransactionService(collection) if collection is not None else None
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.on_event("startup")
    async def startup_db_client():
        """Connect to MongoDB; a failed ping aborts startup"""
        if app.state.transaction_service is not None:
            return
        mongo = MongoConnection(settings)
        mongo.connect()
        if not await mongo.ping():
            mongo.close()
            raise StorageError("Could not connect to MongoDB")
        app.state.mongo = mongo
        app.state.transaction_service = TransactionService(mongo.collection)
        await app.state.transaction_service.ensure_indexes()

    @app.on_event("shutdown")
    async def shutdown_db_client():
        if app.state.mongo is not None:
            app.state.mongo.close()
            app.state.mongo = None

    @app.get("/")
    async def root():
        return {
            "message": "Transaction Service",
            "status": "running",
            "version": __version__,
            "database": "MongoDB",
        }

    @app.get("/health")
    async def health_check():
        service = app.state.transaction_service
        connected = service is not None and await service.ping()
        return {
            "status": "healthy" if connected else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": "connected" if connected else "not connected",
        }

    app.include_router(api_router, prefix="/api")
    return app


def run():
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Server starting on %s:%s", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=get_log_config(settings.log_level),
    )


if __name__ == "__main__":
    run()
