"""Pure booking domain: schedules, blackouts, availability and policy.

Nothing here touches a database session or an ORM row.
"""
