"""
Infrastructure module: Database and Redis/events.

Provides:
- Database sessions and transactions (db.py)
- Redis pub/sub for real-time events (events/)
- Request correlation ids (correlation.py)
"""
