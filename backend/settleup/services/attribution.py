"""Ask Gemini how likely each attendee is to share an expense, from its description."""
import json

import google.generativeai as genai
from loguru import logger

from settleup.config import GEMINI_API_KEY, GEMINI_MODEL


class AttributionError(ValueError):
    pass


class AttributionUnavailable(AttributionError):
    pass


PROMPT = """Given the following expense description and list of participants, determine how likely each participant is to be attributed to the expense. Return a JSON object where the keys are participant names and the values are attribution scores between 0 and 1 (inclusive), where 0 means not at all likely and 1 means very likely. The scores should reflect how much the participant benefited from the expense.

Expense Description: {description}
Participants: {participants}
"""


def build_prompt(description: str, participants: list[str]) -> str:
    return PROMPT.format(description=description, participants=", ".join(participants))


def _generate(prompt: str) -> str:
    genai.configure(api_key=GEMINI_API_KEY)
    model = genai.GenerativeModel(
        model_name=GEMINI_MODEL,
        generation_config=genai.GenerationConfig(
            temperature=0.2,
            response_mime_type="application/json",
        ),
    )
    response = model.generate_content(prompt)
    return response.text


def _strip_code_fence(raw: str) -> str:
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_scores(raw: str, participants: list[str]) -> dict[str, float]:
    """
    Turn the model's JSON reply into a score per participant.
    Unknown names are dropped, missing ones score 0, scores are clamped to [0, 1].
    """
    try:
        data = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        raise AttributionError(f"AI returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise AttributionError("AI returned JSON that is not an object")

    scores: dict[str, float] = {}
    for name in participants:
        value = data.get(name, 0)
        try:
            score = float(value)
        except (TypeError, ValueError):
            score = 0.0
        scores[name] = min(max(score, 0.0), 1.0)
    return scores


def suggest_attributions(description: str, participants: list[str]) -> dict[str, float]:
    if not GEMINI_API_KEY:
        raise AttributionUnavailable(
            "AI suggestions are not configured. The GEMINI_API_KEY environment variable is missing."
        )
    if not participants:
        return {}

    try:
        raw = _generate(build_prompt(description, participants))
    except Exception as exc:
        logger.warning("Gemini request failed: {}", exc)
        err_msg = str(exc)
        if "quota" in err_msg.lower() or "429" in err_msg or "RESOURCE_EXHAUSTED" in err_msg:
            raise AttributionError("The AI service is temporarily at capacity. Please try again in a minute.") from exc
        raise AttributionError(f"AI service error: {err_msg}") from exc

    return parse_scores(raw, participants)


def suggested_participants(scores: dict[str, float], threshold: float) -> list[str]:
    return [name for name, score in scores.items() if score >= threshold]
