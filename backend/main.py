"""
FastAPI Backend - Vacation photo storybooks with printed hardcovers
"""
from contextlib import asynccontextmanager
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import get_settings
from database import check_database_connection, init_db
from errors import StorybookError
from routes.auth_routes import router as auth_router
from routes.book_routes import router as book_router
from routes.page_routes import router as page_router
from routes.image_routes import router as image_router
from routes.order_routes import router as order_router, process_router as order_process_router
from routes.payment_routes import router as payment_router
from routes.story_routes import router as story_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database tables ready")
    yield


app = FastAPI(
    title="Storybook API",
    description="Turns vacation photos into illustrated children's storybooks and printed hardcovers",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for the web client
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    # Clean up errors to make them JSON serializable
    clean_errors = []
    for error in exc.errors():
        error_copy = error.copy()
        if "input" in error_copy:
            # Convert UploadFile or other objects to string for logging/JSON
            error_copy["input"] = str(error_copy["input"])
        error_copy.pop("ctx", None)
        clean_errors.append(error_copy)

    logger.error(f"Validation Error: {clean_errors}")
    return JSONResponse(
        status_code=422,
        content={"detail": clean_errors},
    )


@app.exception_handler(StorybookError)
async def storybook_exception_handler(request, exc):
    logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc)},
    )


# Include routers
app.include_router(auth_router)
app.include_router(book_router)
app.include_router(page_router)
app.include_router(image_router)
app.include_router(order_router)
app.include_router(order_process_router)
app.include_router(payment_router)
app.include_router(story_router)

# Serve stored photos, illustrations and print PDFs (Lulu fetches PDFs from here)
media_path = settings.media_storage_path
os.makedirs(media_path, exist_ok=True)
app.mount("/media", StaticFiles(directory=media_path), name="media")


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "online",
        "message": "Storybook API is running",
        "media_storage": media_path,
    }


@app.get("/health")
async def health_check():
    """Application health check"""
    db_status = "connected" if check_database_connection() else "disconnected"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
