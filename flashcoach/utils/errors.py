"""
Error taxonomy shared by the transport layer, the response parser and the
HTTP handlers. Every error is terminal for the request that raised it.
"""
from typing import Optional


class FlashcoachError(Exception):
    code = "internal_error"
    status_code = 500
    message = "Something went wrong, please try again"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


# -------------------------------------------------------------------
# Transport
# -------------------------------------------------------------------
class MissingCredential(FlashcoachError):
    code = "missing_credential"
    status_code = 500
    message = "API key is not configured on the server"


class UpstreamError(FlashcoachError):
    code = "upstream_error"
    status_code = 502
    message = "The AI service request failed, please try again"


class EmptyResponse(FlashcoachError):
    code = "empty_response"
    status_code = 502
    message = "The AI service returned no usable content, please try again"


# -------------------------------------------------------------------
# Parsing / validation
# -------------------------------------------------------------------
class ParseFailure(FlashcoachError):
    code = "parse_failure"
    status_code = 502
    message = "Could not read the AI response, please try again"


class MalformedItem(FlashcoachError):
    code = "malformed_item"
    status_code = 502
    message = "A flashcard is missing its question or answer, please try again"


class UnexpectedCount(FlashcoachError):
    code = "unexpected_count"
    status_code = 502
    message = "The AI generated the wrong number of flashcards, please try again"


class CountOutOfRange(FlashcoachError):
    code = "count_out_of_range"
    status_code = 502
    message = "The AI generated too few or too many flashcards, please try again"


class InvalidStructure(FlashcoachError):
    code = "invalid_structure"
    status_code = 502
    message = "The AI feedback is incomplete, please try again"
