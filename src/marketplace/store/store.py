"""Store aggregate: a vendor's storefront and its cash-on-delivery eligibility."""

from datetime import datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, List, String, Text

from marketplace.domain import marketplace


class StoreStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


# Statuses that take a store offline and need a recorded reason
_DEACTIVATING_STATUSES = {StoreStatus.REJECTED, StoreStatus.SUSPENDED}


@marketplace.aggregate
class Store:
    vendor_id: Identifier(required=True)
    name: String(required=True, max_length=150)
    description: Text()
    logo_url: String(max_length=500)
    district: String(required=True, max_length=100)
    gi_brands: List(String(max_length=100))
    status: String(choices=StoreStatus, default=StoreStatus.PENDING.value)
    deactivation_reason: String(max_length=500)
    cod_enabled: Boolean(default=True)
    created_at: DateTime(default=datetime.now)
    updated_at: DateTime()

    @invariant.post
    def store_must_carry_a_gi_brand(self):
        if not [b for b in (self.gi_brands or []) if b and b.strip()]:
            raise ValidationError({"gi_brands": ["At least one GI brand is required"]})

    @property
    def is_cod_ready(self) -> bool:
        return self.status == StoreStatus.APPROVED.value and bool(self.cod_enabled)

    @classmethod
    def open(cls, vendor_id, name, district, gi_brands, description=None, logo_url=None):
        from marketplace.store.events import StoreOpened

        if not name or not name.strip():
            raise ValidationError({"name": ["Store name is required"]})
        if not district or not district.strip():
            raise ValidationError({"district": ["District is required"]})

        now = datetime.now()
        store = cls(
            vendor_id=vendor_id,
            name=name.strip(),
            district=district.strip(),
            gi_brands=[b.strip() for b in (gi_brands or []) if b and b.strip()],
            description=description,
            logo_url=logo_url,
            created_at=now,
            updated_at=now,
        )
        store.raise_(
            StoreOpened(
                store_id=store.id,
                vendor_id=vendor_id,
                name=store.name,
                district=store.district,
                gi_brands=store.gi_brands,
                status=store.status,
                opened_at=now,
            )
        )
        return store

    def update_details(self, name=None, description=None, logo_url=None, district=None, gi_brands=None):
        from marketplace.store.events import StoreDetailsUpdated

        if name:
            self.name = name.strip()
        if description is not None:
            self.description = description
        if logo_url is not None:
            self.logo_url = logo_url
        if district:
            self.district = district.strip()
        if gi_brands:
            self.gi_brands = [b.strip() for b in gi_brands if b and b.strip()]

        self.updated_at = datetime.now()
        self.raise_(
            StoreDetailsUpdated(
                store_id=self.id,
                name=self.name,
                district=self.district,
                gi_brands=self.gi_brands,
            )
        )

    def change_status(self, status, reason=None):
        from marketplace.store.events import StoreStatusChanged

        try:
            new_status = StoreStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown store status: {status}"]})

        previous = self.status
        self.status = new_status.value
        if new_status in _DEACTIVATING_STATUSES:
            self.deactivation_reason = reason or None
        elif new_status == StoreStatus.APPROVED:
            self.deactivation_reason = None

        now = datetime.now()
        self.updated_at = now
        self.raise_(
            StoreStatusChanged(
                store_id=self.id,
                previous_status=previous,
                new_status=new_status.value,
                reason=self.deactivation_reason,
                changed_at=now,
            )
        )

    def set_cod(self, enabled):
        from marketplace.store.events import StoreCodToggled

        self.cod_enabled = bool(enabled)
        self.updated_at = datetime.now()
        self.raise_(StoreCodToggled(store_id=self.id, cod_enabled=self.cod_enabled))
