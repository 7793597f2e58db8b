from typing import List

import openai
from openai import AsyncOpenAI

from flashcoach import config
from flashcoach.utils.errors import EmptyResponse, MissingCredential, UpstreamError
from flashcoach.utils.logger import logger


# -------------------------------------------------------------------
# Clients
# Keys are read on every call so a missing key fails the request,
# not the import. Automatic retries are off: retrying is the user's call.
# -------------------------------------------------------------------
def _chat_client(title: str) -> AsyncOpenAI:
    if not config.OPENROUTER_API_KEY:
        raise MissingCredential("OPENROUTER_API_KEY is not configured on the server")

    return AsyncOpenAI(
        api_key=config.OPENROUTER_API_KEY,
        base_url=config.OPENROUTER_BASE_URL,
        max_retries=0,
        default_headers={
            "HTTP-Referer": config.SITE_URL,
            "X-Title": title,
        },
    )


def _audio_client() -> AsyncOpenAI:
    if not config.OPENAI_API_KEY:
        raise MissingCredential("OPENAI_API_KEY is not configured on the server")

    return AsyncOpenAI(
        api_key=config.OPENAI_API_KEY,
        base_url=config.OPENAI_BASE_URL,
        max_retries=0,
    )


def _upstream_error(operation: str, e: openai.APIError) -> UpstreamError:
    if isinstance(e, openai.APIStatusError):
        logger.error(f"[OPENAI] {operation} failed with HTTP {e.status_code}: {e.message}")
    else:
        logger.error(f"[OPENAI] {operation} failed: {e}")
    return UpstreamError()


# -------------------------------------------------------------------
# Chat completions
# -------------------------------------------------------------------
async def run_chat_completion(messages: List[dict], *, title: str = "Flashcoach") -> str:
    """
    Unified call for chat completions. Returns the message text.
    """
    client = _chat_client(title)
    logger.info(f"[OPENAI] Chat request started ({title}, model={config.CHAT_MODEL})")

    try:
        async with client:
            response = await client.chat.completions.create(
                model=config.CHAT_MODEL,
                messages=messages,
            )
    except openai.APIError as e:
        raise _upstream_error("Chat request", e) from e

    content = response.choices[0].message.content if response.choices else None
    if not content or not content.strip():
        logger.error("[OPENAI] Chat response has no content")
        raise EmptyResponse()

    logger.info(f"[OPENAI] Chat request completed ({len(content)} chars)")
    return content


# -------------------------------------------------------------------
# Speech-to-text
# -------------------------------------------------------------------
async def transcribe_audio(
    data: bytes,
    filename: str = "audio.webm",
    content_type: str = "audio/webm",
) -> str:
    client = _audio_client()
    logger.info(f"[OPENAI] Transcription started ({len(data)} bytes, {content_type})")

    try:
        async with client:
            transcription = await client.audio.transcriptions.create(
                model=config.STT_MODEL,
                file=(filename, data, content_type),
                language=config.STT_LANGUAGE,
            )
    except openai.APIError as e:
        raise _upstream_error("Transcription", e) from e

    text = (getattr(transcription, "text", None) or "").strip()
    if not text:
        logger.error("[OPENAI] Transcription returned no text")
        raise EmptyResponse("No speech was recognized, please try recording again")

    logger.info(f"[OPENAI] Transcription completed: '{text[:50]}'")
    return text


# -------------------------------------------------------------------
# Text-to-speech
# -------------------------------------------------------------------
async def synthesize_speech(text: str) -> bytes:
    client = _audio_client()
    logger.info(f"[OPENAI] Speech synthesis started ({len(text)} chars, voice={config.TTS_VOICE})")

    try:
        async with client:
            response = await client.audio.speech.create(
                model=config.TTS_MODEL,
                voice=config.TTS_VOICE,
                input=text,
                response_format="mp3",
            )
            audio = response.content
    except openai.APIError as e:
        raise _upstream_error("Speech synthesis", e) from e

    if not audio:
        logger.error("[OPENAI] Speech synthesis returned no audio")
        raise EmptyResponse()

    logger.info(f"[OPENAI] Speech synthesis completed ({len(audio)} bytes)")
    return audio
