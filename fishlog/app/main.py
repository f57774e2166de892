import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fishlog.app.api.entries import router as entries_router
from fishlog.app.core.errors import DuplicateEntryError, EntryValidationError, MalformedImport, PersistenceError
from fishlog.app.core.logging import configure_logging
from fishlog.app.db.session import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield


app = FastAPI(title="Fishing Log Entry Data Engine", lifespan=lifespan)
app.include_router(entries_router)

# Error type -> HTTP status. Anything else is a genuine server error.
ERROR_STATUS = {
    MalformedImport: 400,
    DuplicateEntryError: 409,
    EntryValidationError: 422,
    PersistenceError: 503,
}


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


for error_type, status_code in ERROR_STATUS.items():
    app.add_exception_handler(error_type, _error_handler(status_code))


@app.get("/")
async def root():
    return {"message": "Welcome to the Fishing Log API"}


@app.get("/health")
async def health_check():
    return {"status": "ok", "message": "Fishing Log API is up and running!"}
