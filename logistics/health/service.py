"""
Informations de santé: présence de la configuration des intégrations
(jamais les valeurs des secrets).
"""
from typing import Any, Dict
from logistics import config

def health_integrations_info() -> Dict[str, Any]:
    missing = [
        name
        for name in ("SUPABASE_URL", "SUPABASE_SERVICE_KEY", "STRIPE_SECRET_KEY")
        if not getattr(config, name, "")
    ]
    sms_ok = bool(config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN and config.TWILIO_FROM_NUMBER)
    return {
        "status": "misconfigured" if missing else "configured",
        "missing": missing,
        "sms": "configured" if sms_ok else "disabled",
        "webhook_secret": bool(config.STRIPE_WEBHOOK_SECRET),
    }
