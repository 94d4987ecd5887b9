import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from taskmarket.core.config import get_settings
from taskmarket.core.logging_setup import setup_logging
from taskmarket.db.firebase_ops import DataAccessError
from taskmarket.routers import admin as admin_router
from taskmarket.routers import auth as auth_router
from taskmarket.routers import comments as comments_router
from taskmarket.routers import profiles as profiles_router
from taskmarket.routers import tasks as tasks_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging in the serving process, including reloader children."""
    setup_logging(get_settings().log_level)
    logger.info("Starting Task Marketplace API")
    yield


app = FastAPI(title="Task Marketplace", lifespan=lifespan)

app.include_router(auth_router.router)
app.include_router(tasks_router.router)
app.include_router(comments_router.router)
app.include_router(profiles_router.router)
app.include_router(admin_router.router)


@app.exception_handler(DataAccessError)
async def data_access_error_handler(request: Request, exc: DataAccessError):
    logger.error("%s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "The data service is unavailable. Please try again.", "retry": True},
    )


@app.get("/")
async def root():
    return {"message": "Welcome to the Task Marketplace"}


def main():
    """Run the FastAPI application."""
    settings = get_settings()
    uvicorn.run(
        "taskmarket.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
