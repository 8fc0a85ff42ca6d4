# app/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import credits, exchange, matching, notification, presence, review, skill, user_skill, users
from app.config import settings
from app.database import Base, engine
from app.exceptions import SkillForgeError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Local/dev convenience; deployed databases are migrated with alembic
    if settings.APP_ENV == "development":
        Base.metadata.create_all(bind=engine)
    logger.info("SkillForge API starting (env=%s)", settings.APP_ENV)
    yield


# Initialize FastAPI app
app = FastAPI(title="SkillForge API", lifespan=lifespan)

# CORS Middleware
cors_origins = [
    origin.strip() for origin in (settings.CORS_ORIGINS or "").split(",") if origin.strip()
] or [
    "http://localhost:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SkillForgeError)
async def skillforge_error_handler(request: Request, exc: SkillForgeError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, **exc.details},
    )


# API routers
app.include_router(exchange.router)      # /exchanges/*
app.include_router(credits.router)       # /credits/*
app.include_router(matching.router)      # /matching/*
app.include_router(skill.router)         # /skills/*
app.include_router(user_skill.router)    # /user-skills/*
app.include_router(review.router)        # /reviews/*
app.include_router(notification.router)  # /notifications/*
app.include_router(users.router)         # /users/*
app.include_router(presence.router)      # /presence/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "SkillForge API is running",
        "version": "1.0.0",
    }
