# app/core/supabase_client.py

import os
from typing import Optional

from supabase import create_client, Client

_service_client: Optional[Client] = None


def get_service_supabase() -> Client:
    """
    Cliente con Service Role para el worker (lee todos los usuarios, sin RLS).
    Lee SUPABASE_URL y SUPABASE_SERVICE_ROLE_KEY del entorno al primer uso,
    para evitar problemas de 'cacheo' en import.
    """
    global _service_client
    if _service_client is not None:
        return _service_client

    url = (os.getenv("SUPABASE_URL") or "").rstrip("/")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or ""
    if not url or not key:
        msg = [
            "Faltan SUPABASE_URL o SUPABASE_SERVICE_ROLE_KEY en el entorno",
            f"SUPABASE_URL: {'<vacío>' if not url else url}",
            f"SUPABASE_SERVICE_ROLE_KEY: {'<vacío>' if not key else '<presente>'}",
        ]
        raise RuntimeError("\n".join(msg))

    _service_client = create_client(url, key)
    return _service_client


def reset_service_supabase() -> None:
    """Olvida el cliente cacheado (p. ej. tras rotar la service key)."""
    global _service_client
    _service_client = None
