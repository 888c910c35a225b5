"""
Single source of truth for database tables that exist after migrations (001).

Use these names when writing raw SQL. alembic/env.py asserts the models match.
"""
ALL_TABLE_NAMES = (
    "reservations",
    "closures",
    "date_notices",
)
