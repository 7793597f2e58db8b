from flashcoach.config import AUTO_MAX_CARDS, AUTO_MIN_CARDS, TITLE_CONTEXT_CHARS
from flashcoach.schemas.flashcards import AUTO_COUNT, CardCount, Language, Scenario
from flashcoach.services.text_cleaner import truncate


LANGUAGE_INSTRUCTIONS = {
    Language.CHINESE: "请用中文生成问题和答案。(Write every question and answer in Simplified Chinese.)",
    Language.ENGLISH: "Please generate questions and answers in English.",
}

SCENARIO_INSTRUCTIONS = {
    Scenario.STUDY: (
        "The learner is studying this material. Questions should test understanding "
        "of the key concepts; answers should be concise but complete."
    ),
    Scenario.INTERVIEW: (
        "The learner is preparing for a job interview on this material. Write questions "
        "the way an interviewer would ask them and answers the way a strong candidate "
        "would reply out loud."
    ),
    Scenario.EXAM: (
        "The learner is preparing for an exam. Write exam-style questions and answers "
        "that list the key points a grader would look for."
    ),
}


def _count_rules(count: CardCount) -> str:
    if count == AUTO_COUNT:
        return (
            f"Decide how many flashcards the material deserves: at least {AUTO_MIN_CARDS} "
            f"and at most {AUTO_MAX_CARDS}."
        )
    return f"Generate EXACTLY {count} flashcards. Not more, not less."


# -------------------------------------------------------------------
# Flashcards
# -------------------------------------------------------------------
def build_flashcards_prompt(
    content: str,
    language: Language,
    scenario: Scenario,
    count: CardCount,
) -> str:
    """
    Build a strict JSON-only flashcard generation prompt.
    """
    return f"""
You are a professional educational assistant.

{LANGUAGE_INSTRUCTIONS[Language(language)]}

{SCENARIO_INSTRUCTIONS[Scenario(scenario)]}

{_count_rules(count)}

Rules:
- Questions must be clear and specific.
- Cover different key points of the material.
- Output MUST be ONLY a JSON array. No markdown, no comments, no explanations.

Return ONLY a JSON array like:
[
  {{"question": "Question 1", "answer": "Answer 1"}},
  {{"question": "Question 2", "answer": "Answer 2"}}
]

MATERIAL:
\"\"\"{content}\"\"\"
"""


# -------------------------------------------------------------------
# Speaking coach
# -------------------------------------------------------------------
def build_speaking_prompt(transcription: str, question: str, answer: str) -> str:
    return f"""
You are a professional English speaking coach. Analyze the following spoken English response.

Question: {question}
Expected Answer: {answer}
User's Spoken Response: {transcription}

Provide:
1. Grammar errors (if any): the original phrase, the corrected phrase, and a short explanation
2. Suggestions for improvement (pronunciation, word choice, sentence structure, fluency)
3. Overall feedback on their speaking

Return your analysis in the following JSON format:
{{
  "transcription": "<the user's spoken response>",
  "grammarErrors": [
    {{"original": "...", "corrected": "...", "explanation": "..."}}
  ],
  "suggestions": ["suggestion1", "suggestion2"],
  "overallFeedback": "detailed feedback here"
}}

Requirements:
- If there are no grammar errors, return an empty array for grammarErrors
- Do not list the same original phrase twice
- Provide at least 2-3 constructive suggestions
- Make the overall feedback encouraging but honest
- Only return the JSON object, no other text or explanations.
"""


# -------------------------------------------------------------------
# Titles
# -------------------------------------------------------------------
def build_title_prompt(content: str) -> str:
    return f"""
Write a short, accurate title (at most 20 characters) for the study material below.
Use the same language as the material. Return ONLY the title text, nothing else.

MATERIAL:
{truncate(content, TITLE_CONTEXT_CHARS)}
"""
