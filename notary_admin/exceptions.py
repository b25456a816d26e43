"""
Exceptions métier du back-office.

Chaque exception porte un message affichable à l'administrateur et le code
HTTP utilisé par les gestionnaires d'exceptions de l'API.
"""
from typing import Any, Dict, Optional

from fastapi import status


class NotaryAdminError(Exception):
    """Exception de base pour toutes les erreurs du back-office"""

    error_code = "internal_error"

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(NotaryAdminError):
    """Champ obligatoire manquant ou format invalide (email, montant...)"""

    error_code = "validation_error"

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)
        self.field = field


class UnknownLocaleError(NotaryAdminError):
    """Code de langue absent du registre (erreur de programmation)"""

    error_code = "unknown_locale"

    def __init__(self, locale: str):
        super().__init__(f"Unknown locale: {locale!r}", details={"locale": locale})
        self.locale = locale


class GatewayError(NotaryAdminError):
    """Échec réseau, auth ou RLS lors d'une lecture/écriture Supabase"""

    error_code = "gateway_error"

    def __init__(self, message: str, table: Optional[str] = None, status_code: int = status.HTTP_502_BAD_GATEWAY):
        details = {"table": table} if table else {}
        super().__init__(message, status_code, details)
        self.table = table


class EntityNotFoundError(GatewayError):
    error_code = "not_found"

    def __init__(self, table: str, row_id: Any):
        super().__init__(f"Élément introuvable ({table} {row_id})", table, status.HTTP_404_NOT_FOUND)
        self.row_id = row_id


class TranslationServiceError(NotaryAdminError):
    """Échec de traduction pour une langue (enregistré, n'interrompt pas le lot)"""

    error_code = "translation_error"

    def __init__(self, message: str, locale: Optional[str] = None):
        details = {"locale": locale} if locale else {}
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)
        self.locale = locale


class TranslationInProgressError(NotaryAdminError):
    error_code = "translation_in_progress"

    def __init__(self, entity_id: str):
        super().__init__(
            "Une traduction est déjà en cours pour cet article",
            status.HTTP_409_CONFLICT,
            {"entity_id": entity_id},
        )


class UploadError(NotaryAdminError):
    """Fichier trop volumineux, type invalide ou échec du stockage"""

    error_code = "upload_error"

    def __init__(self, message: str):
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
