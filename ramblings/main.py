from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from ramblings.routers import admin, comments, images, posts, search
from ramblings.core.config import settings
from ramblings.core.errors import WriteConflictError
from ramblings.core.storage import ImageStorage
from ramblings.database.engine import create_content_store
from ramblings.database.seed import initialize_database

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")

    store = create_content_store(settings)
    app.state.store = store
    app.state.image_storage = ImageStorage(
        upload_dir=settings.IMAGES_DIR,
        max_file_size=settings.MAX_IMAGE_SIZE,
    )
    logger.info("✓ Content store initialized")

    if settings.SEED_SAMPLE_CONTENT:
        await initialize_database(store)

    logger.info("Application startup complete")

    yield

    logger.info("Application shutdown initiated...")
    await store.close()
    logger.info("✓ Content store closed")
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Ramblings Blog API",
    description="Backend API for a personal blog with admin back-office, comment moderation and image uploads",
    version="1.0.0",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,  # Session cookie
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WriteConflictError)
async def write_conflict_handler(request: Request, exc: WriteConflictError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "The content was changed by another request, please retry"},
    )


app.include_router(posts.router)     # Posts: /api/posts/*
app.include_router(comments.router)  # Comments: /api/comments/*
app.include_router(images.router)    # Images: /api/images/*
app.include_router(admin.router)     # Admin session: /api/admin/*
app.include_router(search.router)    # Search: /api/search/*


@app.get("/")
def read_root():
    return {
        "message": f"Welcome to {settings.SITE_NAME}",
        "description": settings.SITE_DESCRIPTION,
        "author": settings.SITE_AUTHOR,
        "url": settings.SITE_URL,
        "version": "1.0.0",
        "modules": {
            "posts": "/api/posts/* (blog posts)",
            "comments": "/api/comments/* (reader comments and moderation)",
            "images": "/api/images/* (image uploads and serving)",
            "admin": "/api/admin/* (admin login session)",
            "search": "/api/search/* (filter, sort and suggestions)"
        },
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
