"""Platform configuration managed by admins: switches, tax rules and shipping rates."""

from datetime import datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace

SETTINGS_ID = "default"
DEFAULT_COD_LIMIT = 100000.0


@marketplace.aggregate
class PlatformSettings:
    """Singleton holding the platform-wide switches, always stored under ``default``."""

    tax_enabled: Boolean(default=True)
    shipping_enabled: Boolean(default=True)
    cod_limit: Float(default=DEFAULT_COD_LIMIT, min_value=0.0)
    strict_cod_risk_check: Boolean(default=False)
    updated_at: DateTime()

    def update(self, **changes):
        from marketplace.settings.events import PlatformSettingsUpdated

        editable = ("tax_enabled", "shipping_enabled", "cod_limit", "strict_cod_risk_check")
        provided = {name: changes[name] for name in editable if changes.get(name) is not None}
        for name, value in provided.items():
            setattr(self, name, value)

        self.updated_at = datetime.now()
        self.raise_(
            PlatformSettingsUpdated(
                settings_id=self.id,
                tax_enabled=self.tax_enabled,
                shipping_enabled=self.shipping_enabled,
                cod_limit=self.cod_limit,
                strict_cod_risk_check=self.strict_cod_risk_check,
            )
        )


@marketplace.aggregate
class TaxRule:
    name: String(required=True, max_length=100)
    rate: Float(required=True, min_value=0.0, max_value=100.0)
    category: String(max_length=100)
    province: String(max_length=100)
    exempt: Boolean(default=False)
    enabled: Boolean(default=True)
    priority: Integer(default=0)


@marketplace.aggregate
class ShippingRateRule:
    name: String(required=True, max_length=100)
    carrier: String(max_length=50, default="internal")
    method: String(max_length=50, default="standard")
    zone: String(max_length=20, default="PK")
    min_weight_kg: Float(default=0.0, min_value=0.0)
    max_weight_kg: Float(default=999.0, min_value=0.0)
    base_rate: Float(default=0.0, min_value=0.0)
    per_kg_rate: Float(default=0.0, min_value=0.0)
    surcharge: Float(default=0.0, min_value=0.0)
    dimensional_factor: Float(min_value=0.0)
    enabled: Boolean(default=True)
    priority: Integer(default=0)

    @invariant.post
    def weight_band_must_be_ordered(self):
        if (self.min_weight_kg or 0) > (self.max_weight_kg or 0):
            raise ValidationError({"max_weight_kg": ["Maximum weight must not be below the minimum"]})


def load_platform_settings():
    """Fetch the settings, creating them with defaults on first use."""
    repo = current_domain.repository_for(PlatformSettings)
    try:
        return repo.get(SETTINGS_ID)
    except ObjectNotFoundError:
        settings = PlatformSettings(id=SETTINGS_ID)
        repo.add(settings)
        return settings


def enabled_tax_rules():
    return current_domain.repository_for(TaxRule)._dao.query.filter(enabled=True).limit(None).all().items


def enabled_shipping_rules():
    return current_domain.repository_for(ShippingRateRule)._dao.query.filter(enabled=True).limit(None).all().items
