"""
Dispatch « fire-and-forget » des notifications SMS.
- Avec un executor: l'envoi est soumis au pool et l'appelant ne l'attend jamais.
- Sans executor (tests, scripts): envoi inline, mêmes garanties d'erreur.
- Aucune erreur d'envoi ne remonte à l'appelant: journalisée puis ignorée.
"""
from concurrent.futures import Executor
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(self, sender, executor: Optional[Executor] = None):
        self.sender = sender
        self.executor = executor

    def _send_safely(self, message: str, to_phone_number: str) -> None:
        try:
            result = self.sender.send(message, to_phone_number)
            if result is not None and not getattr(result, "ok", True):
                logger.warning("notification not sent to=%s code=%s", to_phone_number, getattr(result, "code", ""))
        except Exception:
            logger.exception("notification failed to=%s", to_phone_number)

    def dispatch(self, message: str, to_phone_number: Optional[str]) -> None:
        if not to_phone_number:
            logger.info("notification skipped: destinataire manquant")
            return
        if self.executor is None:
            self._send_safely(message, to_phone_number)
            return
        try:
            self.executor.submit(self._send_safely, message, to_phone_number)
        except Exception:
            # executor arrêté (shutdown en cours)
            logger.exception("notification dispatch refused to=%s", to_phone_number)
