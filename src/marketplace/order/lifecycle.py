"""Fulfilment progression — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class AdvanceOrder:
    order_id: Identifier(required=True)
    status: String(required=True, max_length=20)
    tracking_number: String(max_length=100)
    courier_service: String(max_length=100)
    processing_estimate: String(max_length=100)


@marketplace.command_handler(part_of=Order)
class AdvanceOrderHandler:
    @handle(AdvanceOrder)
    def advance_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.status

        order.advance(
            command.status,
            tracking_number=command.tracking_number,
            courier_service=command.courier_service,
            processing_estimate=command.processing_estimate,
        )
        repo.add(order)

        logger.info("order_status_changed", order_id=str(order.id), previous=previous, status=order.status)
