from __future__ import annotations

from typing import Any

import pandas as pd


def _top(series: pd.Series, n: int = 10) -> list[dict[str, Any]]:
    counts = series.dropna().value_counts().head(n)
    return [{"name": str(name), "count": int(count)} for name, count in counts.items()]


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    if not events:
        return {
            "total_events": 0,
            "events_by_type": {},
            "avg_response_time_ms": 0.0,
            "top_ingredients": [],
            "top_viewed_recipes": [],
            "waitlist_by_referral": {},
        }

    df = pd.DataFrame(events)

    # Average response time over the events that measured one
    if "response_time_ms" in df.columns:
        times = df["response_time_ms"].dropna()
        avg_time = round(float(times.mean()), 1) if not times.empty else 0.0
    else:
        avg_time = 0.0

    # Top searched ingredients
    searches = df[df["type"] == "ingredient_search"]
    if not searches.empty and "ingredients" in searches.columns:
        top_ingredients = _top(searches["ingredients"].explode())
    else:
        top_ingredients = []

    # Most viewed recipes
    views = df[df["type"] == "recipe_view"]
    if not views.empty and "recipe_name" in views.columns:
        top_viewed = _top(views["recipe_name"])
    else:
        top_viewed = []

    # Waitlist joins by referral source
    joins = df[df["type"] == "waitlist_join"]
    if not joins.empty and "referral_source" in joins.columns:
        by_referral = {str(k): int(v) for k, v in joins["referral_source"].value_counts().items()}
    else:
        by_referral = {}

    return {
        "total_events": int(len(df)),
        "events_by_type": {str(k): int(v) for k, v in df["type"].value_counts().items()},
        "avg_response_time_ms": avg_time,
        "top_ingredients": top_ingredients,
        "top_viewed_recipes": top_viewed,
        "waitlist_by_referral": by_referral,
    }
