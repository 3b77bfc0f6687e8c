"""Marketplace bounded context — stores, products, pricing, carts, orders and reviews.

Catalogue, pricing and ordering share one domain so that checkout can read
products, offers, promotions and platform rules from the same repositories
that order placement writes stock back to.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
