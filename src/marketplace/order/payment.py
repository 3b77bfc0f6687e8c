"""Cash-on-delivery collection — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from marketplace.domain import logger, marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class CollectCodPayment:
    order_id: Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class CodPaymentHandler:
    @handle(CollectCodPayment)
    def collect_cod_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.collect_cod_payment()
        repo.add(order)

        logger.info("cod_payment_collected", order_id=str(order.id), receipt_id=order.cod_receipt_id)
        return order.cod_receipt_id
