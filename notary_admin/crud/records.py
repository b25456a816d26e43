import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from notary_admin import database
from notary_admin.exceptions import ValidationError
from notary_admin.models import records as payloads
from notary_admin.services.filters import Page, filter_rows, paginate
from notary_admin.utils.timezone import convert_time_to_notary_timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resource:
    name: str
    table: str
    model: Type[BaseModel]
    required: Tuple[str, ...] = ()
    search_fields: Tuple[str, ...] = ()
    status_field: Optional[str] = "status"
    date_field: Optional[str] = "created_at"
    order_by: Optional[str] = "created_at"


RESOURCES: Dict[str, Resource] = {
    resource.name: resource
    for resource in (
        Resource(
            "notaries",
            database.NOTARIES_TABLE,
            payloads.NotaryPayload,
            required=("full_name", "email"),
            search_fields=("full_name", "email", "phone", "city"),
            status_field=None,
        ),
        Resource(
            "services",
            database.SERVICES_TABLE,
            payloads.ServicePayload,
            required=("name",),
            search_fields=("name", "service_id", "short_description"),
            status_field=None,
        ),
        Resource(
            "options",
            database.OPTIONS_TABLE,
            payloads.OptionPayload,
            required=("name",),
            search_fields=("name", "option_id", "short_description"),
            status_field=None,
        ),
        Resource(
            "submissions",
            database.SUBMISSIONS_TABLE,
            payloads.SubmissionPayload,
            required=("email",),
            search_fields=("first_name", "last_name", "email", "id"),
        ),
        Resource(
            "clients",
            database.CLIENTS_TABLE,
            payloads.ClientPayload,
            required=("first_name", "last_name", "email"),
            search_fields=("first_name", "last_name", "email", "phone"),
            status_field=None,
        ),
        Resource(
            "payments",
            database.PAYMENTS_TABLE,
            payloads.PaymentPayload,
            required=("notary_id", "amount"),
            search_fields=("notary_id", "submission_id", "description"),
        ),
        Resource(
            "messages",
            database.MESSAGES_TABLE,
            payloads.MessagePayload,
            required=("submission_id", "content"),
            search_fields=("content", "sender_type"),
            status_field=None,
        ),
    )
}


def validate_payload(resource: Resource, data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    """
    Valide les données d'un formulaire. Retourne uniquement les champs fournis.
    """
    try:
        model = resource.model(**(data or {}))
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"Champ invalide ({field}) : {first.get('msg')}", field or None) from None

    cleaned = model.model_dump(exclude_unset=True)
    if not partial:
        for name in resource.required:
            value = cleaned.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Le champ {name} est obligatoire", name)
    if not cleaned:
        raise ValidationError("Aucune donnée à enregistrer")
    return cleaned


class RecordRepository:
    def __init__(self, gateway, resource: Resource):
        self.gateway = gateway
        self.resource = resource

    def list(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        period: str = "all",
        page: int = 1,
        per_page: int = 10,
        now: Optional[datetime] = None,
    ) -> Page:
        rows = self.gateway.list(self.resource.table, order_by=self.resource.order_by, descending=True)
        filtered = filter_rows(
            rows,
            search=search,
            search_fields=self.resource.search_fields,
            status=status if self.resource.status_field else None,
            status_field=self.resource.status_field or "status",
            date_field=self.resource.date_field,
            period=period,
            now=now,
        )
        return paginate(filtered, page, per_page)

    def get(self, row_id: str) -> Dict[str, Any]:
        return self.gateway.get_or_404(self.resource.table, row_id)

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = validate_payload(self.resource, data, partial=False)
        created = self.gateway.insert(self.resource.table, cleaned)
        logger.info(f"✅ {self.resource.name} created: {created.get('id')}")
        return created

    def update(self, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        cleaned = validate_payload(self.resource, data, partial=True)
        return self.gateway.update(self.resource.table, row_id, cleaned)

    def delete(self, row_id: str) -> int:
        return self.gateway.delete(self.resource.table, row_id)


def with_notary_time(submission: Dict[str, Any], notary_timezone: Optional[str]) -> Dict[str, Any]:
    """Ajoute l'heure du rendez-vous dans le fuseau du notaire"""
    result = dict(submission)
    result["appointment_time_notary"] = convert_time_to_notary_timezone(
        submission.get("appointment_time"),
        submission.get("appointment_date"),
        submission.get("timezone"),
        notary_timezone,
    )
    return result
