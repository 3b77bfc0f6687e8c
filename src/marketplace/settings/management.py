"""Platform settings, tax rule and shipping rule management — commands and handlers."""

from protean import atomic_change, handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.settings.platform import PlatformSettings, ShippingRateRule, TaxRule, load_platform_settings

_TAX_RULE_FIELDS = ("name", "rate", "category", "province", "exempt", "enabled", "priority")
_SHIPPING_RULE_FIELDS = (
    "name",
    "carrier",
    "method",
    "zone",
    "min_weight_kg",
    "max_weight_kg",
    "base_rate",
    "per_kg_rate",
    "surcharge",
    "dimensional_factor",
    "enabled",
    "priority",
)


def _provided(command, names):
    return {name: getattr(command, name) for name in names if getattr(command, name) is not None}


@marketplace.command(part_of="PlatformSettings")
class UpdatePlatformSettings:
    tax_enabled: Boolean()
    shipping_enabled: Boolean()
    cod_limit: Float()
    strict_cod_risk_check: Boolean()


@marketplace.command(part_of="TaxRule")
class CreateTaxRule:
    name: String(required=True, max_length=100)
    rate: Float(required=True)
    category: String(max_length=100)
    province: String(max_length=100)
    exempt: Boolean(default=False)
    enabled: Boolean(default=True)
    priority: Integer(default=0)


@marketplace.command(part_of="TaxRule")
class UpdateTaxRule:
    rule_id: Identifier(required=True)
    name: String(max_length=100)
    rate: Float()
    category: String(max_length=100)
    province: String(max_length=100)
    exempt: Boolean()
    enabled: Boolean()
    priority: Integer()


@marketplace.command(part_of="TaxRule")
class DeleteTaxRule:
    rule_id: Identifier(required=True)


@marketplace.command(part_of="ShippingRateRule")
class CreateShippingRule:
    name: String(required=True, max_length=100)
    carrier: String(max_length=50, default="internal")
    method: String(max_length=50, default="standard")
    zone: String(max_length=20, default="PK")
    min_weight_kg: Float(default=0.0)
    max_weight_kg: Float(default=999.0)
    base_rate: Float(default=0.0)
    per_kg_rate: Float(default=0.0)
    surcharge: Float(default=0.0)
    dimensional_factor: Float()
    enabled: Boolean(default=True)
    priority: Integer(default=0)


@marketplace.command(part_of="ShippingRateRule")
class UpdateShippingRule:
    rule_id: Identifier(required=True)
    name: String(max_length=100)
    carrier: String(max_length=50)
    method: String(max_length=50)
    zone: String(max_length=20)
    min_weight_kg: Float()
    max_weight_kg: Float()
    base_rate: Float()
    per_kg_rate: Float()
    surcharge: Float()
    dimensional_factor: Float()
    enabled: Boolean()
    priority: Integer()


@marketplace.command(part_of="ShippingRateRule")
class DeleteShippingRule:
    rule_id: Identifier(required=True)


@marketplace.command_handler(part_of=PlatformSettings)
class PlatformSettingsHandler:
    @handle(UpdatePlatformSettings)
    def update_settings(self, command):
        settings = load_platform_settings()
        settings.update(
            tax_enabled=command.tax_enabled,
            shipping_enabled=command.shipping_enabled,
            cod_limit=command.cod_limit,
            strict_cod_risk_check=command.strict_cod_risk_check,
        )
        current_domain.repository_for(PlatformSettings).add(settings)
        logger.info("platform_settings_updated", cod_limit=settings.cod_limit, tax_enabled=settings.tax_enabled)


@marketplace.command_handler(part_of=TaxRule)
class TaxRuleHandler:
    @handle(CreateTaxRule)
    def create_rule(self, command):
        rule = TaxRule(**_provided(command, _TAX_RULE_FIELDS))
        current_domain.repository_for(TaxRule).add(rule)
        logger.info("tax_rule_created", rule_id=str(rule.id), rate=rule.rate)
        return str(rule.id)

    @handle(UpdateTaxRule)
    def update_rule(self, command):
        repo = current_domain.repository_for(TaxRule)
        rule = repo.get(command.rule_id)
        for name, value in _provided(command, _TAX_RULE_FIELDS).items():
            setattr(rule, name, value)
        repo.add(rule)

    @handle(DeleteTaxRule)
    def delete_rule(self, command):
        repo = current_domain.repository_for(TaxRule)
        repo._dao.delete(repo.get(command.rule_id))


@marketplace.command_handler(part_of=ShippingRateRule)
class ShippingRuleHandler:
    @handle(CreateShippingRule)
    def create_rule(self, command):
        rule = ShippingRateRule(**_provided(command, _SHIPPING_RULE_FIELDS))
        current_domain.repository_for(ShippingRateRule).add(rule)
        logger.info("shipping_rule_created", rule_id=str(rule.id), method=rule.method)
        return str(rule.id)

    @handle(UpdateShippingRule)
    def update_rule(self, command):
        repo = current_domain.repository_for(ShippingRateRule)
        rule = repo.get(command.rule_id)
        with atomic_change(rule):
            for name, value in _provided(command, _SHIPPING_RULE_FIELDS).items():
                setattr(rule, name, value)
        repo.add(rule)

    @handle(DeleteShippingRule)
    def delete_rule(self, command):
        repo = current_domain.repository_for(ShippingRateRule)
        repo._dao.delete(repo.get(command.rule_id))
