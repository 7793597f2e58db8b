from typing import List

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class GrammarError(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    original: StrictStr
    corrected: StrictStr
    explanation: StrictStr


class SpeakingFeedback(BaseModel):
    """Structured critique of a spoken answer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    transcription: str = ""
    grammar_errors: List[GrammarError] = Field(default_factory=list, alias="grammarErrors")
    suggestions: List[str] = Field(default_factory=list)
    overall_feedback: str = Field(alias="overallFeedback")


class AnalyzeSpeakingRequest(BaseModel):
    transcription: str
    question: str = ""
    answer: str = ""


class TranscriptionResponse(BaseModel):
    transcription: str


class SpeechRequest(BaseModel):
    text: str
