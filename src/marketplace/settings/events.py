"""Domain events for platform configuration."""

from protean.fields import Boolean, Float, Identifier

from marketplace.domain import marketplace


@marketplace.event(part_of="PlatformSettings")
class PlatformSettingsUpdated:
    __version__ = 1

    settings_id: Identifier(required=True)
    tax_enabled: Boolean()
    shipping_enabled: Boolean()
    cod_limit: Float()
    strict_cod_risk_check: Boolean()
