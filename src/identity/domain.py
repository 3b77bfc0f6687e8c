"""Identity bounded context — users, roles and buyer shipping preferences.

Authentication is handled outside this service; the context only keeps the
account records that the marketplace refers to by id.
"""

import structlog
from protean.domain import Domain

identity = Domain(name="identity")

logger = structlog.get_logger(__name__)
