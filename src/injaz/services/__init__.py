"""Service layer: plain functions over a SQLAlchemy session.

Services flush but never commit; the caller owns the transaction.
"""

from injaz.services.errors import InvalidInputError, NotFoundError, ServiceError

__all__ = ["InvalidInputError", "NotFoundError", "ServiceError"]
