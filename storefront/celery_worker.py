# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# importa os modulos de tasks para o worker registra-las
celery_app.conf.imports = (
    "storefront.services.notification_service",
)

celery_app.conf.timezone = "America/Sao_Paulo"
