# storefront/utils/settings.py
import os
from decimal import Decimal
from dotenv import load_dotenv

load_dotenv()

# loja / destino do pedido
RESTAURANT_NAME = os.getenv("RESTAURANT_NAME", "BURGUESIA")
RESTAURANT_WHATSAPP = os.getenv("RESTAURANT_WHATSAPP", "5511999999999")
MESSAGING_HOST = os.getenv("MESSAGING_HOST", "wa.me")

# entrega e pagamento
DELIVERY_FEE = Decimal(os.getenv("DELIVERY_FEE", "5.00"))
DELIVERY_ETA = os.getenv("DELIVERY_ETA", "45-60 minutos")
PICKUP_ETA = os.getenv("PICKUP_ETA", "30-40 minutos")
MAX_INSTALLMENTS = int(os.getenv("MAX_INSTALLMENTS", 3))

# persistencia do carrinho
CART_STORAGE_KEY = os.getenv("CART_STORAGE_KEY", "cartItems")
CART_BACKEND = os.getenv("CART_BACKEND", "memory")  # memory | redis | sql
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

# colaboradores externos
VIACEP_URL = os.getenv("VIACEP_URL", "https://viacep.com.br")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
