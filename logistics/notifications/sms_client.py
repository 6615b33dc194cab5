"""
Envoi de SMS via l'API REST Twilio (httpx).
- Un seul client httpx par processus (créé au démarrage, fermé au shutdown).
- Identifiants manquants -> envoi désactivé: MessageResult(ok=False, code="SMS_DISABLED").
"""
from dataclasses import dataclass
from typing import Optional
import logging

import httpx

from logistics.config import TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_FROM_NUMBER, SMS_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

TWILIO_BASE = "https://api.twilio.com/2010-04-01"


@dataclass
class MessageResult:
    ok: bool
    code: str = ""
    message: str = ""
    raw: Optional[dict] = None


def _map_twilio_error(status: int) -> str:
    if status in (401, 403):
        return "SMS_AUTH_FAILED"
    if status == 429:
        return "SMS_RATE_LIMITED"
    if status in (400, 404, 422):
        return "SMS_INVALID_RECIPIENT"
    return "SMS_PROVIDER_DOWN"


class TwilioSmsSender:
    name = "twilio"

    def __init__(
        self,
        account_sid: str = TWILIO_ACCOUNT_SID,
        auth_token: str = TWILIO_AUTH_TOKEN,
        from_number: str = TWILIO_FROM_NUMBER,
        client: Optional[httpx.Client] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self._client = client or httpx.Client(timeout=SMS_TIMEOUT_SECONDS)

    @property
    def enabled(self) -> bool:
        return bool(self.account_sid and self.auth_token and self.from_number)

    def send(self, message: str, to_phone_number: str) -> MessageResult:
        if not self.enabled:
            logger.info("sms disabled (Twilio non configuré), to=%s", to_phone_number)
            return MessageResult(ok=False, code="SMS_DISABLED", message="twilio not configured")
        if not (to_phone_number or "").strip():
            return MessageResult(ok=False, code="SMS_INVALID_RECIPIENT", message="missing recipient")

        url = f"{TWILIO_BASE}/Accounts/{self.account_sid}/Messages.json"
        r = self._client.post(
            url,
            data={"To": to_phone_number.strip(), "From": self.from_number, "Body": message},
            auth=(self.account_sid, self.auth_token),
        )
        data = r.json() if r.content else {}
        if 200 <= r.status_code < 300:
            return MessageResult(ok=True, code="OK", message="sent", raw=data if isinstance(data, dict) else None)
        detail = str((data or {}).get("message") or f"http_{r.status_code}") if isinstance(data, dict) else f"http_{r.status_code}"
        return MessageResult(ok=False, code=_map_twilio_error(r.status_code), message=detail[:200], raw=data if isinstance(data, dict) else None)

    def close(self) -> None:
        self._client.close()
