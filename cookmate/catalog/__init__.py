"""
Recipe catalog package.

Responsibilities:
- Define the recipe document and its request models.
- Persist recipes with unique names, popularity counts and running ratings.
- Rank free-text searches over the catalog.
- Load the bundled seed catalog.
"""
