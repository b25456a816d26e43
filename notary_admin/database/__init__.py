"""
Accès à la base Supabase (Postgres + storage) avec la clé service-role.

Toutes les erreurs du backend (réseau, auth, RLS) remontent en `GatewayError`.
"""
import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from notary_admin import config
from notary_admin.exceptions import EntityNotFoundError, GatewayError

logger = logging.getLogger(__name__)

BLOG_POSTS_TABLE = "blog_posts"
NOTARIES_TABLE = "notary"
SERVICES_TABLE = "services"
OPTIONS_TABLE = "options"
SUBMISSIONS_TABLE = "submission"
CLIENTS_TABLE = "client"
PAYMENTS_TABLE = "notary_payments"
MESSAGES_TABLE = "message"

_client: Optional[Client] = None


def get_client() -> Client:
    """Retourne le client Supabase (créé au premier appel)"""
    global _client
    if _client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_ROLE_KEY:
            raise GatewayError("Database not configured. Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        try:
            _client = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_ROLE_KEY)
        except Exception as exc:
            logger.error(f"Supabase client creation failed: {str(exc)}")
            raise GatewayError(f"Connexion à la base impossible : {exc}") from exc
        logger.info("✅ Supabase client initialised")
    return _client


class SupabaseGateway:
    """Lecture / écriture des tables, toujours filtrées par clé primaire `id`"""

    def __init__(self, client: Client):
        self.client = client

    def _run(self, table: str, action: str, query) -> List[Dict[str, Any]]:
        try:
            response = query.execute()
        except Exception as exc:
            logger.error(f"Supabase {action} on {table} failed: {str(exc)}")
            raise GatewayError(f"Erreur base de données ({action} {table}) : {exc}", table) from exc
        return response.data or []

    def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        rows = self._run(table, "select", self.client.table(table).select("*").eq("id", row_id).limit(1))
        return rows[0] if rows else None

    def get_or_404(self, table: str, row_id: str) -> Dict[str, Any]:
        row = self.get(table, row_id)
        if row is None:
            raise EntityNotFoundError(table, row_id)
        return row

    def list(self, table: str, order_by: Optional[str] = "created_at", descending: bool = True) -> List[Dict[str, Any]]:
        query = self.client.table(table).select("*")
        if order_by:
            query = query.order(order_by, desc=descending)
        return self._run(table, "select", query)

    def insert(self, table: str, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._run(table, "insert", self.client.table(table).insert(data))
        return rows[0] if rows else dict(data)

    def update(self, table: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Mise à jour partielle : seules les clés fournies sont écrites"""
        if not data:
            return {}
        rows = self._run(table, "update", self.client.table(table).update(data).eq("id", row_id))
        if not rows:
            raise EntityNotFoundError(table, row_id)
        return rows[0]

    def delete(self, table: str, row_id: str) -> int:
        rows = self._run(table, "delete", self.client.table(table).delete().eq("id", row_id))
        return len(rows)


def get_gateway() -> SupabaseGateway:
    return SupabaseGateway(get_client())
