# logistics.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale du backend logistique.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Stripe, Twilio), CORS
- Expose les constantes de tarification par flux (seuils de distance, suppléments)
- Fournit les URLs de redirection du checkout (FRONTEND_URL)
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _env_float(name: str, default: float) -> float:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default

def _env_int(name: str, default: int) -> int:
    raw = _clean_env(os.getenv(name) or "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or "")
SUPABASE_KEY = _clean_env(os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Bucket Supabase Storage pour les preuves de livraison
PROOF_BUCKET = _clean_env(os.getenv("PROOF_BUCKET") or "delivery-proofs")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# Stripe: clé privée, secret webhook, retries réseau du SDK
STRIPE_SECRET_KEY = _clean_env(os.getenv("STRIPE_SECRET_KEY") or "")
STRIPE_WEBHOOK_SECRET = _clean_env(os.getenv("STRIPE_WEBHOOK_SECRET") or "")
STRIPE_MAX_NETWORK_RETRIES = _env_int("STRIPE_MAX_NETWORK_RETRIES", 2)

# Checkout: devise, front (pages succès/annulation), fenêtre de la clé d'idempotence
CHECKOUT_CURRENCY = _clean_env(os.getenv("CHECKOUT_CURRENCY") or "eur").lower()
FRONTEND_URL = _clean_env(os.getenv("FRONTEND_URL") or "http://localhost:3000").rstrip("/")
CHECKOUT_IDEMPOTENCY_WINDOW_SECONDS = _env_int("CHECKOUT_IDEMPOTENCY_WINDOW_SECONDS", 600)

# Tarification: un seuil par flux (livraison / intention d'achat), suppléments en unités majeures
DELIVERY_FAR_THRESHOLD_KM = _env_float("DELIVERY_FAR_THRESHOLD_KM", 10.0)
BUYER_INTENT_FAR_THRESHOLD_KM = _env_float("BUYER_INTENT_FAR_THRESHOLD_KM", 6.0)
NEAR_SURCHARGE = _env_int("NEAR_SURCHARGE", 5)
FAR_SURCHARGE = _env_int("FAR_SURCHARGE", 12)

# Twilio (SMS): si un identifiant manque, l'envoi est désactivé (log + skip)
TWILIO_ACCOUNT_SID = _clean_env(os.getenv("TWILIO_ACCOUNT_SID") or "")
TWILIO_AUTH_TOKEN = _clean_env(os.getenv("TWILIO_AUTH_TOKEN") or "")
TWILIO_FROM_NUMBER = _clean_env(os.getenv("TWILIO_FROM_NUMBER") or "")
SMS_TIMEOUT_SECONDS = _env_float("SMS_TIMEOUT_SECONDS", 10.0)
NOTIFICATION_WORKERS = _env_int("NOTIFICATION_WORKERS", 2)
