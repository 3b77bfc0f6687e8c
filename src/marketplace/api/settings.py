"""Admin platform configuration endpoints: switches, tax rules and shipping rates."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.access import Actor, current_actor, require_admin
from marketplace.api.schemas import (
    IdResponse,
    PlatformSettingsRequest,
    PlatformSettingsResponse,
    ShippingRuleRequest,
    ShippingRuleResponse,
    StatusResponse,
    TaxRuleRequest,
    TaxRuleResponse,
)
from marketplace.settings.management import (
    CreateShippingRule,
    CreateTaxRule,
    DeleteShippingRule,
    DeleteTaxRule,
    UpdatePlatformSettings,
    UpdateShippingRule,
    UpdateTaxRule,
)
from marketplace.settings.platform import ShippingRateRule, TaxRule, load_platform_settings

router = APIRouter(prefix="/admin", tags=["settings"])


def _settings_response(settings) -> PlatformSettingsResponse:
    return PlatformSettingsResponse(
        tax_enabled=bool(settings.tax_enabled),
        shipping_enabled=bool(settings.shipping_enabled),
        cod_limit=settings.cod_limit,
        strict_cod_risk_check=bool(settings.strict_cod_risk_check),
    )


@router.get("/platform/settings", response_model=PlatformSettingsResponse)
async def get_settings(actor: Actor = Depends(current_actor)) -> PlatformSettingsResponse:
    require_admin(actor)
    return _settings_response(load_platform_settings())


@router.put("/platform/settings", response_model=PlatformSettingsResponse)
async def update_settings(
    body: PlatformSettingsRequest, actor: Actor = Depends(current_actor)
) -> PlatformSettingsResponse:
    require_admin(actor)
    current_domain.process(UpdatePlatformSettings(**body.model_dump(exclude_none=True)), asynchronous=False)
    return _settings_response(load_platform_settings())


# --- Tax rules ---


@router.get("/tax-rules", response_model=list[TaxRuleResponse])
async def list_tax_rules(actor: Actor = Depends(current_actor)) -> list[TaxRuleResponse]:
    require_admin(actor)
    rules = current_domain.repository_for(TaxRule)._dao.query.order_by("-priority").limit(None).all().items
    return [
        TaxRuleResponse(
            rule_id=str(r.id),
            name=r.name,
            rate=r.rate,
            category=r.category,
            province=r.province,
            exempt=bool(r.exempt),
            enabled=bool(r.enabled),
            priority=r.priority or 0,
        )
        for r in rules
    ]


@router.post("/tax-rules", status_code=201, response_model=IdResponse)
async def create_tax_rule(body: TaxRuleRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_admin(actor)
    command = CreateTaxRule(**body.model_dump(exclude_none=True))
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@router.put("/tax-rules/{rule_id}", response_model=StatusResponse)
async def update_tax_rule(rule_id: str, body: TaxRuleRequest, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(UpdateTaxRule(rule_id=rule_id, **body.model_dump(exclude_none=True)), asynchronous=False)
    return StatusResponse()


@router.delete("/tax-rules/{rule_id}", response_model=StatusResponse)
async def delete_tax_rule(rule_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(DeleteTaxRule(rule_id=rule_id), asynchronous=False)
    return StatusResponse()


# --- Shipping-rate rules ---


@router.get("/shipping-rate-rules", response_model=list[ShippingRuleResponse])
async def list_shipping_rules(actor: Actor = Depends(current_actor)) -> list[ShippingRuleResponse]:
    require_admin(actor)
    rules = current_domain.repository_for(ShippingRateRule)._dao.query.order_by("-priority").limit(None).all().items
    return [
        ShippingRuleResponse(
            rule_id=str(r.id),
            name=r.name,
            carrier=r.carrier,
            method=r.method,
            zone=r.zone,
            min_weight_kg=r.min_weight_kg,
            max_weight_kg=r.max_weight_kg,
            base_rate=r.base_rate,
            per_kg_rate=r.per_kg_rate,
            surcharge=r.surcharge,
            dimensional_factor=r.dimensional_factor,
            enabled=bool(r.enabled),
            priority=r.priority or 0,
        )
        for r in rules
    ]


@router.post("/shipping-rate-rules", status_code=201, response_model=IdResponse)
async def create_shipping_rule(body: ShippingRuleRequest, actor: Actor = Depends(current_actor)) -> IdResponse:
    require_admin(actor)
    command = CreateShippingRule(**body.model_dump(exclude_none=True))
    return IdResponse(id=current_domain.process(command, asynchronous=False))


@router.put("/shipping-rate-rules/{rule_id}", response_model=StatusResponse)
async def update_shipping_rule(
    rule_id: str, body: ShippingRuleRequest, actor: Actor = Depends(current_actor)
) -> StatusResponse:
    require_admin(actor)
    current_domain.process(
        UpdateShippingRule(rule_id=rule_id, **body.model_dump(exclude_none=True)),
        asynchronous=False,
    )
    return StatusResponse()


@router.delete("/shipping-rate-rules/{rule_id}", response_model=StatusResponse)
async def delete_shipping_rule(rule_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    require_admin(actor)
    current_domain.process(DeleteShippingRule(rule_id=rule_id), asynchronous=False)
    return StatusResponse()
