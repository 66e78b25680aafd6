# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.domain.models import OrderMessage
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Entrega o link do pedido ao canal externo (WhatsApp).
    Fire-and-forget: o checkout nao espera nem observa a entrega.
    """

    def dispatch_order(self, order_id: str, message: OrderMessage) -> bool:
        try:
            send_order_message_task.delay(order_id, message.url)
        except Exception as e:
            # broker fora do ar nao pode derrubar o pedido, o link ja volta para o cliente
            logger.warning(f"Falha ao enfileirar pedido {order_id}: {e}")
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.send_order_message_task")
def send_order_message_task(order_id: str, url: str):
    """
    Celery task - aqui entraria a integracao com a API do WhatsApp Business.
    Por enquanto apenas registra o link gerado.
    """
    logger.info(f"[WHATSAPP] Pedido {order_id}: {url}")
    return {"order_id": order_id, "url": url, "status": "sent"}
