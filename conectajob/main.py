import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
import uvicorn

from conectajob.core.config import get_settings
from conectajob.core.errors import MarketplaceError
from conectajob.routers import admin as admin_router
from conectajob.routers import auth as auth_router
from conectajob.routers import categories as categories_router
from conectajob.routers import projects as projects_router
from conectajob.routers import ratings as ratings_router
from conectajob.routers import users as users_router

logger = logging.getLogger(__name__)


def configure_logging():
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    yield


app = FastAPI(title="ConectaJob API", lifespan=lifespan)

app.include_router(auth_router.router)
app.include_router(users_router.router)
app.include_router(projects_router.router)
app.include_router(ratings_router.router)
app.include_router(categories_router.router)
app.include_router(admin_router.router)


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)


@app.get("/")
async def root():
    return {"message": "Welcome to ConectaJob"}


def main():
    """Run the FastAPI application."""
    configure_logging()
    uvicorn.run(
        "conectajob.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=get_settings().log_level.lower(),
    )


if __name__ == "__main__":
    main()
