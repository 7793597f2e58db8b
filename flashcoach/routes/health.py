from fastapi import APIRouter

from flashcoach import config

router = APIRouter()


@router.get("/")
async def health():
    """
    Liveness plus which upstream credentials are configured.
    Key values are never echoed back.
    """
    chat_ready = bool(config.OPENROUTER_API_KEY)
    audio_ready = bool(config.OPENAI_API_KEY)

    return {
        "status": "ok" if chat_ready and audio_ready else "degraded",
        "message": "Flashcoach backend is running",
        "credentials": {
            "chat": chat_ready,
            "audio": audio_ready,
        },
        "models": {
            "chat": config.CHAT_MODEL,
            "transcription": config.STT_MODEL,
            "speech": config.TTS_MODEL,
        },
    }
