"""
Free-text catalog search.

Recipes are ranked by TF-IDF cosine similarity between the query and each
recipe's name, description and tags. Only recipes sharing at least one term
with the query are returned.
"""
from __future__ import annotations

import numpy as np
from sklearn.feature_extraction.text import TfidfVectorizer
from sklearn.metrics.pairwise import cosine_similarity

from .models import Recipe


def _document(recipe: Recipe) -> str:
    parts = [recipe.name, recipe.description, " ".join(recipe.tags)]
    return " ".join(p for p in parts if p).lower()


def rank_by_text(recipes: list[Recipe], query: str) -> list[tuple[Recipe, float]]:
    """Return ``(recipe, score)`` pairs with a positive score, best first.

    Equal scores keep the order of *recipes*, so callers pass them pre-sorted
    by their secondary key.
    """
    query = query.strip().lower()
    if not recipes or not query:
        return []

    vectorizer = TfidfVectorizer(stop_words="english")
    try:
        matrix = vectorizer.fit_transform([_document(r) for r in recipes])
    except ValueError:
        # Every document was made only of stop words.
        return []

    query_vec = vectorizer.transform([query])
    scores = cosine_similarity(query_vec, matrix).ravel()
    order = np.argsort(-scores, kind="stable")
    return [(recipes[i], round(float(scores[i]), 4)) for i in order if scores[i] > 0]
