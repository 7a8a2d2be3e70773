"""
Shared module for common utilities used by the REST API and the CLI.

STRUCTURE:
- shared.security: Webhook signature verification, rate limiting
  - request_signing.py: HMAC-SHA512 signing/verification of raw bodies
  - rate_limit.py: slowapi limiter

- shared.infrastructure: Database and request tracing
  - db.py: SQLAlchemy sessions, safe_commit()
  - correlation.py: X-Request-ID middleware and logging filter

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Payment statuses, quality tiers, meal slots

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - schemas.py: Shared Pydantic schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import PaymentStatus, QualityTier
    from shared.utils.exceptions import NotFoundError, ValidationError
"""
