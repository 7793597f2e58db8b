import json
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from flashcoach.config import AUTO_MAX_CARDS, AUTO_MIN_CARDS
from flashcoach.schemas.flashcards import AUTO_COUNT, CardCount, Flashcard
from flashcoach.schemas.speaking import GrammarError, SpeakingFeedback
from flashcoach.utils.errors import (
    CountOutOfRange,
    InvalidStructure,
    MalformedItem,
    ParseFailure,
    UnexpectedCount,
)
from flashcoach.utils.logger import logger


"""
response_parser.py

Tolerant parsing of language-model replies into validated domain objects.
The model is asked for pure JSON but may wrap it in code fences, add prose
around it, or emit loose objects instead of an array. Every heuristic lives
behind parse(); callers only see validated models or a typed error.
"""


class ResponseShape(str, Enum):
    FLASHCARDS = "flashcards"
    FEEDBACK = "feedback"


# ```json ... ``` wrapper, with or without a language hint; only at the edges
_OPEN_FENCE_RE = re.compile(r"\A\s*```[\w+-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?```\s*\Z")

# Flat {...} objects; flashcards never nest
_OBJECT_RE = re.compile(r"\{[^{}]*\}")
_TRAILING_COMMA_RE = re.compile(r",\s*\}$")
_QUESTION_KEY_RE = re.compile(r'"question"\s*:')
_ANSWER_KEY_RE = re.compile(r'"answer"\s*:')

_REQUIRED_FEEDBACK_KEYS = ("grammarErrors", "suggestions", "overallFeedback")
_GRAMMAR_FIELDS = ("original", "corrected", "explanation")

_NOTHING = object()


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------
def strip_code_fences(text: Optional[str]) -> str:
    """
    Remove markdown code fences and surrounding whitespace.
    """
    text = _OPEN_FENCE_RE.sub("", text or "", count=1)
    text = _CLOSE_FENCE_RE.sub("", text, count=1)
    return text.strip()


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return _NOTHING


def _as_card_list(data: Any) -> Optional[List[Any]]:
    if isinstance(data, dict):
        data = data.get("flashcards")
    if not isinstance(data, list):
        return None
    # a list of anything but objects (e.g. a "[1]" footnote) is not a card list
    if not all(isinstance(item, dict) for item in data):
        return None
    return data


# -------------------------------------------------------------------
# Flashcard recovery strategies
# -------------------------------------------------------------------
def _from_whole_text(text: str) -> Optional[List[Any]]:
    data = _loads(text)
    if data is _NOTHING:
        return None
    return _as_card_list(data)


def _from_bracket_slice(text: str) -> Optional[List[Any]]:
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return _from_whole_text(text[start:end + 1])


def _from_object_scan(text: str) -> List[Dict[str, Any]]:
    items: List[Dict[str, Any]] = []

    for match in _OBJECT_RE.finditer(text):
        chunk = match.group(0)
        if not (_QUESTION_KEY_RE.search(chunk) and _ANSWER_KEY_RE.search(chunk)):
            continue

        data = _loads(_TRAILING_COMMA_RE.sub("}", chunk))
        if isinstance(data, dict):
            items.append(data)

    return items


_STRATEGIES = (
    ("direct", _from_whole_text),
    ("bracket-slice", _from_bracket_slice),
    ("object-scan", _from_object_scan),
)


def recover_flashcard_items(raw: Optional[str]) -> List[Any]:
    """
    Run the recovery strategies in order and return the first non-empty
    list of raw items. Items are not validated here.
    """
    cleaned = strip_code_fences(raw)
    if not cleaned:
        raise ParseFailure("The AI returned an empty response, please try again")

    for name, strategy in _STRATEGIES:
        items = strategy(cleaned)
        if items:
            logger.info(f"[PARSER] Recovered {len(items)} items via {name}")
            return items

    logger.error(f"[PARSER] No strategy recovered flashcards. Raw (200 chars): {cleaned[:200]}")
    raise ParseFailure()


# -------------------------------------------------------------------
# Flashcard validation
# -------------------------------------------------------------------
def validate_flashcards(items: List[Any]) -> List[Flashcard]:
    cards: List[Flashcard] = []

    for index, item in enumerate(items, start=1):
        try:
            cards.append(Flashcard.model_validate(item))
        except ValidationError as e:
            logger.warning(f"[PARSER] Flashcard #{index} rejected: {e.error_count()} errors")
            raise MalformedItem(
                f"Flashcard #{index} is missing its question or answer, please try again"
            ) from e

    return cards


def check_count(cards: List[Flashcard], count: Optional[CardCount]) -> None:
    """
    Fixed counts must match exactly; "auto" only has to stay within bounds.
    """
    size = len(cards)

    if count is None:
        return

    if count == AUTO_COUNT:
        if not AUTO_MIN_CARDS <= size <= AUTO_MAX_CARDS:
            raise CountOutOfRange(
                f"Expected {AUTO_MIN_CARDS}-{AUTO_MAX_CARDS} flashcards but got {size}, please try again"
            )
        return

    if size != count:
        raise UnexpectedCount(f"Expected {count} flashcards but got {size}, please try again")


def parse_flashcards(raw: Optional[str], count: Optional[CardCount] = None) -> List[Flashcard]:
    items = recover_flashcard_items(raw)
    cards = validate_flashcards(items)
    check_count(cards, count)
    return cards


def dump_flashcards(cards: List[Flashcard]) -> str:
    """Canonical JSON form of a parsed card list."""
    return json.dumps([card.model_dump() for card in cards], ensure_ascii=False)


# -------------------------------------------------------------------
# Speaking feedback
# -------------------------------------------------------------------
def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _grammar_key(error: GrammarError) -> str:
    return error.original.strip().casefold()


def _valid_grammar_errors(raw_errors: Any) -> List[GrammarError]:
    if not isinstance(raw_errors, list):
        if raw_errors is not None:
            logger.warning(f"[PARSER] grammarErrors is {type(raw_errors).__name__}, using []")
        return []

    errors: List[GrammarError] = []
    for item in raw_errors:
        if not isinstance(item, dict) or not all(_is_filled(item.get(f)) for f in _GRAMMAR_FIELDS):
            logger.warning(f"[PARSER] Dropping malformed grammar error: {str(item)[:100]}")
            continue
        errors.append(GrammarError.model_validate(item))

    return errors


def dedupe_grammar_errors(errors: List[GrammarError]) -> List[GrammarError]:
    seen = set()
    unique: List[GrammarError] = []

    for error in errors:
        key = _grammar_key(error)
        if key in seen:
            continue
        seen.add(key)
        unique.append(error)

    return unique


def _valid_suggestions(raw_suggestions: Any) -> List[str]:
    if not isinstance(raw_suggestions, list):
        return []
    return [s for s in raw_suggestions if _is_filled(s)]


def parse_feedback(raw: Optional[str], transcription: Optional[str] = None) -> SpeakingFeedback:
    """
    Parse a speaking-feedback object. Unlike flashcards there is no
    substring salvage: invalid JSON fails the whole request.
    """
    cleaned = strip_code_fences(raw)

    try:
        data = json.loads(cleaned)
    except ValueError as e:
        logger.error(f"[PARSER] Feedback is not valid JSON. Raw (200 chars): {cleaned[:200]}")
        raise ParseFailure("Could not read the AI feedback, please try again") from e

    if not isinstance(data, dict):
        raise InvalidStructure()

    missing = [key for key in _REQUIRED_FEEDBACK_KEYS if key not in data]
    if missing:
        logger.error(f"[PARSER] Feedback missing keys: {missing}")
        raise InvalidStructure(f"The AI feedback is missing {', '.join(missing)}, please try again")

    overall = data["overallFeedback"]
    if not _is_filled(overall):
        raise InvalidStructure("The AI feedback has no overall comment, please try again")

    spoken = data.get("transcription")
    if not isinstance(spoken, str):
        spoken = transcription or ""

    return SpeakingFeedback(
        transcription=spoken,
        grammar_errors=dedupe_grammar_errors(_valid_grammar_errors(data["grammarErrors"])),
        suggestions=_valid_suggestions(data["suggestions"]),
        overall_feedback=overall,
    )


# -------------------------------------------------------------------
# Public API
# -------------------------------------------------------------------
def parse(raw: Optional[str], shape: ResponseShape, count: Optional[CardCount] = None):
    """
    Parse raw model text into the requested shape.

    FLASHCARDS -> List[Flashcard] (count policy applied when count is given)
    FEEDBACK   -> SpeakingFeedback
    """
    shape = ResponseShape(shape)

    if shape is ResponseShape.FLASHCARDS:
        return parse_flashcards(raw, count)

    return parse_feedback(raw)
