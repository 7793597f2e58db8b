from flashcoach.schemas.flashcards import Language, Scenario
from flashcoach.services.prompts import (
    build_flashcards_prompt,
    build_speaking_prompt,
    build_title_prompt,
)
from flashcoach.services.text_cleaner import clean_text


def test_flashcards_prompt_embeds_fixed_count():
    prompt = build_flashcards_prompt("Photosynthesis turns light into sugar.", Language.ENGLISH, Scenario.STUDY, 5)

    assert "EXACTLY 5 flashcards" in prompt
    assert "Photosynthesis turns light into sugar." in prompt
    assert "in English" in prompt


def test_flashcards_prompt_auto_count_gives_bounds():
    prompt = build_flashcards_prompt("material", Language.CHINESE, Scenario.EXAM, "auto")

    assert "at least 3" in prompt
    assert "at most 20" in prompt
    assert "EXACTLY" not in prompt
    assert "中文" in prompt


def test_flashcards_prompt_varies_by_scenario():
    study = build_flashcards_prompt("m", Language.ENGLISH, Scenario.STUDY, 10)
    interview = build_flashcards_prompt("m", Language.ENGLISH, Scenario.INTERVIEW, 10)

    assert "interviewer" in interview
    assert "interviewer" not in study


def test_flashcards_prompt_is_deterministic():
    args = ("material", Language.ENGLISH, Scenario.STUDY, 10)

    assert build_flashcards_prompt(*args) == build_flashcards_prompt(*args)


def test_speaking_prompt_contains_inputs_and_format():
    prompt = build_speaking_prompt("I go store", "Where did you go?", "I went to the store.")

    assert "I go store" in prompt
    assert "Where did you go?" in prompt
    assert "I went to the store." in prompt
    assert '"grammarErrors"' in prompt
    assert '"overallFeedback"' in prompt


def test_title_prompt_truncates_material():
    content = "a" * 400 + "b" * 400

    prompt = build_title_prompt(content)

    assert "a" * 400 + "b" * 100 in prompt
    assert "b" * 101 not in prompt


def test_clean_text_normalizes_whitespace():
    raw = "Line one\r\n\r\n\r\n\r\nLine   two\t\there  "

    assert clean_text(raw) == "Line one\n\nLine two here"
    assert clean_text("") == ""
