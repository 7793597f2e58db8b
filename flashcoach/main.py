from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flashcoach import config
from flashcoach.routes import (
    flashcards,
    speaking,
    health,
)

from flashcoach.utils.errors import FlashcoachError
from flashcoach.utils.logger import logger
from flashcoach.utils.error_handler import flashcoach_error_handler, log_exceptions


# -------------------------------------------------------------------
# FastAPI application
# -------------------------------------------------------------------
app = FastAPI(
    title="Flashcoach API",
    version="0.1.0",
)

# -------------------------------------------------------------------
# Error handling
# -------------------------------------------------------------------
app.middleware("http")(log_exceptions)
app.add_exception_handler(FlashcoachError, flashcoach_error_handler)

# -------------------------------------------------------------------
# CORS settings
# -------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not config.OPENROUTER_API_KEY:
    logger.warning("OPENROUTER_API_KEY is not set. Flashcards and speaking feedback will not work.")
if not config.OPENAI_API_KEY:
    logger.warning("OPENAI_API_KEY is not set. Transcription and speech will not work.")

logger.info("Backend started")


# -------------------------------------------------------------------
# Routers
# -------------------------------------------------------------------
app.include_router(flashcards.router, prefix="/flashcards", tags=["Flashcards"])
app.include_router(speaking.router,   prefix="/speaking",   tags=["Speaking"])
app.include_router(health.router,     prefix="/health",     tags=["Health"])


# -------------------------------------------------------------------
# Root endpoint
# -------------------------------------------------------------------
@app.get("/")
async def root():
    return {
        "status": "ok",
        "message": "Flashcoach API is running",
        "version": "0.1.0",
    }
