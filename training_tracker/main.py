import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from training_tracker.config import get_settings
from training_tracker.database import init_db
from training_tracker.exceptions import TrackerError
from training_tracker.routers import editions_router, tasks_router, templates_router, activity_router
from training_tracker.services.payloads import format_validation_errors

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup"""
    logger.info("Initialising database")
    init_db()
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Training Tracker",
    description="Training editions, their week-relative task checklists and task lifecycle",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TrackerError)
async def tracker_error_handler(request: Request, exc: TrackerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"message": format_validation_errors(exc.errors())})


app.include_router(editions_router)
app.include_router(tasks_router)
app.include_router(templates_router)
app.include_router(activity_router)


@app.get("/health")
async def health():
    """Liveness probe"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "training_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
