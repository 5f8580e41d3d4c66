"""
Persistence layer.

Responsibilities:
- Hold documents in keyed, insertion-ordered collections.
- Offer filter/sort/skip/limit queries and counts.
- Make counter updates atomic update-and-fetch operations.
- Shape paginated listing results.
"""
