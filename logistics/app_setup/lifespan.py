"""
Lifespan FastAPI: initialisation/arrêt des ressources partagées.
- Construit UNE fois les collaborateurs du coeur (client Stripe, registre,
  store des commandes, expéditeur SMS + pool de notifications) sur app.state.
- Initialise FastAPILimiter (Redis) avec options de test (fakeredis).
- Variables d’environnement supportées:
  - DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS=1: désactive complètement (tests)
  - USE_FAKE_REDIS_FOR_TESTS=1: utilise fakeredis (tests)
  - LOCAL_RATE_LIMIT_FALLBACK=1: active un fallback local si l’init échoue
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

import redis.asyncio as redis
from fastapi import FastAPI
from fastapi_limiter import FastAPILimiter

from logistics.config import NOTIFICATION_WORKERS
from logistics.notifications import NotificationDispatcher, TwilioSmsSender
from logistics.orders.repository import OrderStore
from logistics.payments.ledger import PaymentSessionLedger
from logistics.payments.stripe_client import StripeProvider

try:
    from fakeredis.aioredis import FakeRedis  # tests only
except Exception:
    FakeRedis = None

def init_services(app: FastAPI) -> ThreadPoolExecutor:
    """Enregistre les collaborateurs partagés sur app.state et retourne le pool de notifications."""
    executor = ThreadPoolExecutor(max_workers=max(1, NOTIFICATION_WORKERS), thread_name_prefix="notify")
    app.state.payment_provider = StripeProvider()
    app.state.sms_sender = TwilioSmsSender()
    app.state.dispatcher = NotificationDispatcher(app.state.sms_sender, executor)
    app.state.ledger = PaymentSessionLedger()
    app.state.orders = OrderStore()
    return executor

async def init_rate_limiter(app: FastAPI, logger: logging.Logger) -> None:
    """
    Configure le rate limiting et gère les fallbacks.
    - En cas d’échec de Redis et sans fallback, le rate limiting est désactivé proprement.
    """
    if os.getenv("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS") == "1":
        app.state.rate_limit_enabled = False
        logger.info("Rate limiting disabled by DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS")
        return
    try:
        use_fake = os.getenv("USE_FAKE_REDIS_FOR_TESTS") == "1"
        if use_fake:
            if not FakeRedis:
                raise RuntimeError("USE_FAKE_REDIS_FOR_TESTS=1 mais fakeredis n'est pas installé.")
            r = FakeRedis(decode_responses=True)
        else:
            redis_url = os.getenv("RATE_LIMIT_REDIS_URL", "redis://127.0.0.1:6379/0")
            r = redis.from_url(redis_url, encoding="utf-8", decode_responses=True)

        await FastAPILimiter.init(r)
        app.state.rate_limit_enabled = True
        logger.info("Rate limiting enabled")
    except Exception as e:
        if os.getenv("LOCAL_RATE_LIMIT_FALLBACK") == "1":
            app.state.rate_limit_enabled = True
            logger.warning(f"Rate limiting falling back to local in-memory due to init error: {e}")
        else:
            app.state.rate_limit_enabled = False
            logger.warning(f"Rate limiting disabled due to init error: {e}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("uvicorn.error")
    executor = init_services(app)
    await init_rate_limiter(app, logger)
    try:
        yield
    finally:
        # Laisse partir les SMS déjà soumis avant l'arrêt
        executor.shutdown(wait=True)
        app.state.sms_sender.close()
        logger.info("Notification pool stopped")
