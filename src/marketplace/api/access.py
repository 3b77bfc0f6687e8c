"""Caller identity and role checks at the API edge.

Authentication lives outside this service: callers identify themselves
with the ``actor-id`` and ``actor-role`` headers, and the routes check
roles and ownership before dispatching commands.
"""

from dataclasses import dataclass

from fastapi import Header, HTTPException
from protean.utils.globals import current_domain

from marketplace.store.store import Store

ROLE_ADMIN = "admin"
ROLE_VENDOR = "vendor"
ROLE_BUYER = "buyer"


@dataclass(frozen=True)
class Actor:
    id: str | None
    role: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_vendor(self) -> bool:
        return self.role == ROLE_VENDOR


def current_actor(
    actor_id: str | None = Header(None),
    actor_role: str | None = Header(None),
) -> Actor:
    return Actor(id=actor_id, role=(actor_role or "").lower() or None)


def forbidden(detail="Forbidden"):
    return HTTPException(status_code=403, detail=detail)


def require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise forbidden("Admin access required")


def require_role(actor: Actor, *roles) -> None:
    if actor.id is None or actor.role not in roles:
        raise forbidden()


def require_self_or_admin(actor: Actor, buyer_id) -> None:
    """Buyer-scoped resources belong to the buyer named in the path."""
    if actor.is_admin:
        return
    if actor.id is None or str(actor.id) != str(buyer_id):
        raise forbidden()


def owned_store_ids(actor: Actor) -> set[str]:
    if actor.id is None:
        return set()
    stores = current_domain.repository_for(Store)._dao.query.filter(vendor_id=str(actor.id)).limit(None).all().items
    return {str(store.id) for store in stores}


def require_store_owner(actor: Actor, store_id) -> None:
    """Admins manage any store; vendors only their own."""
    if actor.is_admin:
        return
    store = current_domain.repository_for(Store).get(store_id)
    if not actor.is_vendor or str(store.vendor_id) != str(actor.id):
        raise forbidden("You do not own this store")


def require_order_access(actor: Actor, order, allow_buyer=False) -> None:
    """Admins always pass; vendors need a store on the order; the buyer only when allowed."""
    if actor.is_admin:
        return
    if allow_buyer and actor.id is not None and str(order.buyer_id) == str(actor.id):
        return
    if actor.is_vendor and order.store_ids & owned_store_ids(actor):
        return
    raise forbidden("Not authorized for this order")
