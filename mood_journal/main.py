# mood journal api
# fastapi app with async mongodb, session jwt auth, and langchain + gemini feedback

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mood_journal.config import settings
from mood_journal.errors import register_exception_handlers
from mood_journal.services.db import db
from mood_journal.routers import auth, diary, feedback, comments, emotions, share

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """startup: connect to mongodb. shutdown: close connection."""
    logger.info("Starting Mood Journal backend...")
    await db.connect()
    logger.info("Mood Journal backend ready")
    yield
    logger.info("Shutting down Mood Journal backend...")
    await db.close()


app = FastAPI(
    title="Mood Journal API",
    description="Backend API for the mood journal, diary entries, AI titles and feedback, share links, emotion stats",
    version="0.1.0",
    lifespan=lifespan,
)

# cors, credentials are needed for the session cookie, so origins must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(dict.fromkeys([settings.FRONTEND_URL, *settings.ALLOWED_ORIGINS])),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Type", "Authorization", "X-Requested-With", "Accept"],
)

register_exception_handlers(app)

# register routers
app.include_router(auth.router)
app.include_router(diary.router)
app.include_router(feedback.router)
app.include_router(comments.router)
app.include_router(emotions.router)
app.include_router(share.router)


@app.get("/api/health")
async def health_check():
    """basic health check endpoint"""
    return {
        "status": "ok",
        "service": "mood-journal-api",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
