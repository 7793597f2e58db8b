from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response

from flashcoach.schemas.speaking import (
    AnalyzeSpeakingRequest,
    SpeakingFeedback,
    SpeechRequest,
    TranscriptionResponse,
)
from flashcoach.services.openai_client import synthesize_speech, transcribe_audio
from flashcoach.services.speaking_coach import analyze_speaking
from flashcoach.utils.logger import logger

router = APIRouter()


@router.post("/transcribe", response_model=TranscriptionResponse)
async def transcribe(audio: UploadFile = File(...)):
    data = await audio.read()
    if not data:
        logger.warning("[SPEAKING] Empty audio upload")
        raise HTTPException(status_code=400, detail="Audio file is required")

    # Whisper picks the decoder from the file extension
    text = await transcribe_audio(
        data,
        filename=audio.filename or "audio.webm",
        content_type=audio.content_type or "audio/webm",
    )
    return TranscriptionResponse(transcription=text)


@router.post(
    "/analyze",
    response_model=SpeakingFeedback,
    response_model_by_alias=True,
)
async def analyze(payload: AnalyzeSpeakingRequest):
    if not payload.transcription.strip():
        raise HTTPException(status_code=400, detail="Transcription is required")

    return await analyze_speaking(
        transcription=payload.transcription,
        question=payload.question,
        answer=payload.answer,
    )


@router.post("/speech")
async def speech(payload: SpeechRequest):
    if not payload.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    audio = await synthesize_speech(payload.text)
    return Response(content=audio, media_type="audio/mpeg")
