from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, StrictStr, field_validator


class Language(str, Enum):
    """Output language of the generated cards."""

    CHINESE = "zh"
    ENGLISH = "en"


class Scenario(str, Enum):
    STUDY = "study"
    INTERVIEW = "interview"
    EXAM = "exam"


AUTO_COUNT = "auto"

# Either a fixed number of cards or "auto" (model decides, 3–20)
CardCount = Union[PositiveInt, Literal["auto"]]


class Flashcard(BaseModel):
    """Simple question/answer flashcard."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    question: StrictStr
    answer: StrictStr

    @field_validator("question", "answer")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class FlashcardSet(BaseModel):
    """A titled set of flashcards with its generation parameters."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    flashcards: List[Flashcard]
    created_at: datetime = Field(alias="createdAt")
    language: Language
    scenario: Scenario


# ---------------------------
# Request / response models
# ---------------------------

class GenerateFlashcardsRequest(BaseModel):
    content: str
    language: Language = Language.CHINESE
    scenario: Scenario = Scenario.STUDY
    count: CardCount = 10
    # persist the generated set into the local history
    save: bool = True


class GenerateFlashcardsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    flashcards: List[Flashcard]
    flashcard_set: Optional[FlashcardSet] = Field(default=None, alias="set")


class TitleRequest(BaseModel):
    content: str


class TitleResponse(BaseModel):
    title: str
