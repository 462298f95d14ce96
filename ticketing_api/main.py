from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ticketing_api import db
from ticketing_api.config import get_settings
from ticketing_api.data_access import CategoriesDataAccess
from ticketing_api.errors import (
    ConfigurationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from ticketing_api.logger import configure_logging
from ticketing_api.routers import categories
from ticketing_api.services import ensure_general_category

_ERROR_STATUS_CODES: dict[type[DomainError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    settings = get_settings()
    logger = configure_logging(settings.log_level)
    await db.init_db()
    async with db.get_session_scope() as session:
        await ensure_general_category(
            CategoriesDataAccess(session), settings.general_category_name
        )
    logger.info("Ticketing API started.")
    yield


app = FastAPI(lifespan=lifespan)
app.include_router(categories.router)


@app.exception_handler(DomainError)
async def domain_error_handler(_: Request, exc: DomainError) -> JSONResponse:
    status_code = _ERROR_STATUS_CODES.get(
        type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.detail})


@app.get("/")
def read_root() -> dict[str, str]:
    return {"status": "ok"}
