from typing import Optional
from supabase import create_client, Client
from logistics.config import SUPABASE_URL, SUPABASE_KEY, SUPABASE_SERVICE_KEY

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    """Client 'anon' partagé, pour les lectures."""
    global _supabase
    if _supabase is None:
        _supabase = create_client(SUPABASE_URL, SUPABASE_KEY)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role partagé (bypass RLS), pour les écritures serveur:
    registre des sessions, drapeau paid, statut de livraison, storage.
    """
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_KEY manquant pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase
