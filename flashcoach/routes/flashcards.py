from typing import List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool

from flashcoach.schemas.flashcards import (
    FlashcardSet,
    GenerateFlashcardsRequest,
    GenerateFlashcardsResponse,
    TitleRequest,
    TitleResponse,
)
from flashcoach.services.history import FlashcardHistory, get_history
from flashcoach.services.llm_flashcards import generate_flashcards, generate_title
from flashcoach.utils.errors import FlashcoachError
from flashcoach.utils.logger import logger

router = APIRouter()

UNTITLED = "Untitled set"


@router.post("/generate", response_model=GenerateFlashcardsResponse)
async def generate(
    payload: GenerateFlashcardsRequest,
    history: FlashcardHistory = Depends(get_history),
):
    """
    Generate flashcards from pasted material.
    With save=true the set also gets a title and goes into the history.
    """
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Please provide some study material")

    flashcards = await generate_flashcards(
        content=payload.content,
        language=payload.language,
        scenario=payload.scenario,
        count=payload.count,
    )

    if not payload.save:
        return GenerateFlashcardsResponse(flashcards=flashcards)

    # a missing title should not cost the user their flashcards
    try:
        title = await generate_title(payload.content)
    except FlashcoachError as e:
        logger.warning(f"[FLASHCARDS] Title generation failed ({e.code}), using fallback")
        title = UNTITLED

    # history.add does blocking file I/O under a lock
    flashcard_set = await run_in_threadpool(
        history.add,
        title=title,
        flashcards=flashcards,
        language=payload.language,
        scenario=payload.scenario,
    )
    return GenerateFlashcardsResponse(flashcards=flashcards, flashcard_set=flashcard_set)


@router.post("/title", response_model=TitleResponse)
async def title(payload: TitleRequest):
    if not payload.content.strip():
        raise HTTPException(status_code=400, detail="Content must not be empty")

    return TitleResponse(title=await generate_title(payload.content))


# -------------------------------------------------------------------
# History
# -------------------------------------------------------------------
@router.get("/sets", response_model=List[FlashcardSet])
def list_sets(history: FlashcardHistory = Depends(get_history)):
    return history.all()


@router.get("/sets/{set_id}", response_model=FlashcardSet)
def get_set(set_id: str, history: FlashcardHistory = Depends(get_history)):
    flashcard_set = history.get(set_id)
    if flashcard_set is None:
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    return flashcard_set


@router.delete("/sets/{set_id}")
def delete_set(set_id: str, history: FlashcardHistory = Depends(get_history)):
    if not history.remove(set_id):
        raise HTTPException(status_code=404, detail="Flashcard set not found")
    return {"status": "ok", "id": set_id}
