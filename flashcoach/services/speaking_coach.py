from flashcoach.schemas.speaking import SpeakingFeedback
from flashcoach.services.openai_client import run_chat_completion
from flashcoach.services.prompts import build_speaking_prompt
from flashcoach.services.response_parser import parse_feedback
from flashcoach.utils.logger import logger


async def analyze_speaking(transcription: str, question: str, answer: str) -> SpeakingFeedback:
    """
    Ask the model to critique a transcribed answer and validate its reply.
    """
    logger.info(f"[SPEAKING] Analyze → transcript chars={len(transcription)}")

    prompt = build_speaking_prompt(transcription, question, answer)
    raw = await run_chat_completion(
        [{"role": "user", "content": prompt}],
        title="Speaking Coach",
    )
    logger.info(f"[SPEAKING] Raw response (first 200 chars): {raw[:200]}")

    feedback = parse_feedback(raw, transcription=transcription)
    logger.info(
        f"[SPEAKING] Completed: {len(feedback.grammar_errors)} grammar errors, "
        f"{len(feedback.suggestions)} suggestions"
    )
    return feedback
