"""
Services module for business logic.

CLEAN ARCHITECTURE:
- domain/: Application services for the order-to-bill flow

Usage:
    from rest_api.services.domain import TableRegistry
    tables = TableRegistry(db, notifier)
    rows = tables.list_table_status()
"""
