import re
from flashcoach.utils.logger import logger


def normalize_whitespace(text: str) -> str:
    # \r\n and \r become \n
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    # more than two blank lines in a row -> one blank line
    text = re.sub(r"\n{3,}", "\n\n", text)
    # collapse runs of spaces and tabs
    text = re.sub(r"[ \t]+", " ", text)
    return text


def clean_text(raw_text: str) -> str:
    """
    Normalize pasted study material before it goes into a prompt.
    """
    if not raw_text:
        return ""

    text = normalize_whitespace(raw_text).strip()
    logger.debug(f"Text cleaning finished, length={len(text)}")
    return text


def truncate(text: str, limit: int) -> str:
    return text[:limit]
