"""
Modèles de validation des écrans CRUD (notaires, services, options,
rendez-vous, clients, paiements, messages).

Tous les champs sont optionnels : les mises à jour sont partielles et les
champs obligatoires à la création sont listés dans chaque ressource.
"""
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class NotaryPayload(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    timezone: Optional[str] = None
    license_number: Optional[str] = None
    bio: Optional[str] = None
    iban: Optional[str] = None
    bic: Optional[str] = None
    bank_name: Optional[str] = None
    is_active: Optional[bool] = None


class ServicePayload(BaseModel):
    service_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    base_price: Optional[float] = Field(None, ge=0)
    cta: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_active: Optional[bool] = None


class OptionPayload(BaseModel):
    option_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    icon: Optional[str] = None
    additional_price: Optional[float] = Field(None, ge=0)
    cta: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    is_active: Optional[bool] = None


class SubmissionPayload(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    funnel_status: Optional[str] = None
    appointment_date: Optional[str] = None  # YYYY-MM-DD
    appointment_time: Optional[str] = None  # HH:MM, fuseau du client
    timezone: Optional[str] = None
    assigned_notary_id: Optional[str] = None
    notes: Optional[str] = None


class ClientPayload(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class PaymentPayload(BaseModel):
    notary_id: Optional[str] = None
    submission_id: Optional[str] = None
    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    status: Optional[str] = None
    payment_date: Optional[str] = None
    description: Optional[str] = None


class MessagePayload(BaseModel):
    submission_id: Optional[str] = None
    sender_type: Optional[str] = None
    content: Optional[str] = None
    read: Optional[bool] = None
