from typing import List

from flashcoach.schemas.flashcards import CardCount, Flashcard, Language, Scenario
from flashcoach.services.openai_client import run_chat_completion
from flashcoach.services.prompts import build_flashcards_prompt, build_title_prompt
from flashcoach.services.response_parser import ResponseShape, parse
from flashcoach.services.text_cleaner import clean_text
from flashcoach.utils.errors import EmptyResponse
from flashcoach.utils.logger import logger


"""
llm_flashcards.py

Flashcard and title generation. One chat call per request; the reply goes
through the tolerant parser, which enforces the requested count.
"""

TITLE_QUOTES = "\"'“”‘’「」《》"


async def generate_flashcards(
    content: str,
    language: Language,
    scenario: Scenario,
    count: CardCount,
) -> List[Flashcard]:
    cleaned = clean_text(content)
    logger.info(
        f"[FLASHCARDS] Start → chars={len(cleaned)} language='{language.value}' "
        f"scenario='{scenario.value}' count={count}"
    )

    prompt = build_flashcards_prompt(cleaned, language, scenario, count)
    raw = await run_chat_completion(
        [{"role": "user", "content": prompt}],
        title="Flashcard Generator",
    )
    logger.info(f"[FLASHCARDS] Raw response (first 200 chars): {raw[:200]}")

    flashcards = parse(raw, ResponseShape.FLASHCARDS, count=count)
    logger.info(f"[FLASHCARDS] Completed with {len(flashcards)} cards")
    return flashcards


async def generate_title(content: str) -> str:
    prompt = build_title_prompt(clean_text(content))
    raw = await run_chat_completion(
        [{"role": "user", "content": prompt}],
        title="Title Generator",
    )

    # models like to wrap titles in quotes or add a trailing newline
    title = raw.strip().splitlines()[0].strip().strip(TITLE_QUOTES).strip()
    if not title:
        raise EmptyResponse("The AI did not return a title")

    logger.info(f"[FLASHCARDS] Title → '{title}'")
    return title
