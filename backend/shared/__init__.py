"""
Shared module for common infrastructure used by the REST API and the CLI.

STRUCTURE:
- shared.infrastructure: Database and messaging
  - db.py: SQLAlchemy sessions, run_atomic(), safe_commit()
  - correlation.py: Request correlation ids
  - events/: Event schema, Redis pub/sub, notification gateways

- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging
  - constants.py: OrderStatus, BillStatus, transition table

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - backoff.py: Retry delay with jitter
  - schemas.py: Shared Pydantic schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, run_atomic
    from shared.config.settings import settings
    from shared.config.constants import OrderStatus, BillStatus
    from shared.utils.exceptions import NotFoundError, ConflictError
"""
