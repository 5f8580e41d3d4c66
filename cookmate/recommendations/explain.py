from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from ..config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a friendly Indian home-cooking assistant. "
    "Given a cook's preferences and a list of recipes already chosen for them, "
    "write a short, encouraging one-sentence reason for each recipe.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"recommendations": [{"id": "<recipe_id>", "reason": "<one sentence>"}]}\n'
    "Include only recipes from the provided list."
)


def _build_user_message(
    preferences: dict[str, Any],
    recipes: list[dict[str, Any]],
) -> str:
    lines = ["## Cook Preferences"]
    if preferences.get("cooking_experience"):
        lines.append(f"- Experience: {preferences['cooking_experience']}")
    if preferences.get("dietary_preferences"):
        lines.append(f"- Diet: {', '.join(preferences['dietary_preferences'])}")
    if preferences.get("favorite_cuisines"):
        lines.append(f"- Favourite cuisines: {', '.join(preferences['favorite_cuisines'])}")
    if preferences.get("spice_level"):
        lines.append(f"- Spice tolerance: up to {preferences['spice_level']}")

    lines.append("\n## Recipes")
    lines.append("| ID | Name | Cuisine | Difficulty | Total time | Spice |")
    lines.append("|---|---|---|---|---|---|")
    for r in recipes:
        lines.append(
            f"| {r['id']} | {r['name']} | {r.get('cuisine', '?')} "
            f"| {r.get('difficulty', '?')} | {r.get('total_time', '?')} min "
            f"| {r.get('spice_level', '?')} |"
        )

    return "\n".join(lines)


def explain_recommendations(
    preferences: dict[str, Any],
    recipes: list[dict[str, Any]],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> dict[str, str]:
    """
    Ask the Groq LLM for a one-line reason per recommended recipe.

    Returns a dict mapping recipe id -> reason string.
    Returns empty dict on any failure (timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return {}

    if not recipes:
        return {}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(preferences, recipes),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=0.3,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        known_ids = {r["id"] for r in recipes}
        results: dict[str, str] = {}
        for item in parsed.get("recommendations", []):
            rid = str(item.get("id", ""))
            reason = item.get("reason", "")
            if rid in known_ids and reason:
                results[rid] = reason

        return results

    except Exception:
        logger.warning("Groq LLM call failed, recommendations sent without reasons", exc_info=True)
        return {}
