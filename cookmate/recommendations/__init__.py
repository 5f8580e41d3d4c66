"""
Recommendation engine.

Responsibilities:
- Filter the recipe catalog by a user's diet, spice, cuisine and skill.
- Rank recipes by how many of their ingredients the cook has on hand.
- Derive quick and trending recipe lists.
- Optionally attach LLM-written reasons without changing the order.
"""
