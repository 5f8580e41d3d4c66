"""
Accounts package.

Responsibilities:
- Register and authenticate users with bcrypt password hashes.
- Guard routes by session identity and role.
- Track favourites, saved recipes and cooking streaks.
"""
