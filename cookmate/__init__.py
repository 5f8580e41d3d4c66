"""
Cookmate backend.

Recipe catalog, personalised recommendations, ingredient-based lookup and the
early-access waitlist behind the Cookmate landing page.
"""
