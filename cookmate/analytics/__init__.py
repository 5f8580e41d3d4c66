"""
Activity analytics.

Responsibilities:
- Record request-level events in process.
- Aggregate them into the admin analytics view.
"""
