"""
Request schemas for the RH Manager API.

Every endpoint that reads a body validates it through one of these models, so
required/optional fields are declared here rather than read ad hoc in routes.
"""
import re
from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from models.demande import REQUEST_STATUSES, REQUEST_TYPES
from models.visa import (
    DOC_MISSING, DOC_RECEIVED_PHYSICAL, DOC_UPLOADED,
    DOSSIER_APPROVED, DOSSIER_STATUS_RANK,
)

PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")
TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class _Schema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


# -----------------------------
# Auth
# -----------------------------
class LoginIn(_Schema):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ForgotPasswordIn(_Schema):
    email: EmailStr


class ResetPasswordIn(_Schema):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=6)


# -----------------------------
# Employees
# -----------------------------
class EmployeeUpdate(_Schema):
    matricule: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    cin: Optional[str] = Field(None, min_length=1, max_length=50)
    birth_date: Optional[date] = None
    passport_number: Optional[str] = None
    passport_issue_date: Optional[date] = None
    passport_expiry_date: Optional[date] = None
    position: Optional[str] = Field(None, min_length=1)
    site: Optional[str] = Field(None, min_length=1)
    contract_type: Optional[str] = Field(None, min_length=1)
    contract_start_date: Optional[date] = None
    contract_end_date: Optional[date] = None
    gross_salary: Optional[Decimal] = Field(None, ge=0)
    email: Optional[EmailStr] = None
    manager1_email: Optional[EmailStr] = None
    manager2_email: Optional[EmailStr] = None
    photo: Optional[str] = None
    hr_file: Optional[str] = None

    @field_validator(
        "matricule", "last_name", "first_name", "cin", "position", "site",
        "contract_type", "contract_start_date", "gross_salary",
    )
    @classmethod
    def _not_null(cls, v, info):
        # optional in a partial update, but the column is NOT NULL
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @model_validator(mode="after")
    def _check_dates(self):
        if self.contract_start_date and self.contract_end_date:
            if self.contract_end_date < self.contract_start_date:
                raise ValueError("contract_end_date must not be before contract_start_date")
        if self.passport_issue_date and self.passport_expiry_date:
            if self.passport_expiry_date < self.passport_issue_date:
                raise ValueError("passport_expiry_date must not be before passport_issue_date")
        return self


class EmployeeIn(EmployeeUpdate):
    matricule: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=100)
    first_name: str = Field(..., min_length=1, max_length=100)
    cin: str = Field(..., min_length=1, max_length=50)
    position: str = Field(..., min_length=1)
    site: str = Field(..., min_length=1)
    contract_type: str = Field(..., min_length=1)
    contract_start_date: date
    gross_salary: Decimal = Field(..., ge=0)


class ArchiveIn(_Schema):
    exit_interview: Optional[str] = None


# -----------------------------
# Leave requests (demande_rh)
# -----------------------------
class DemandeUpdate(_Schema):
    request_type: Optional[Literal[REQUEST_TYPES]] = Field(None, alias="type_demande")
    title: Optional[str] = Field(None, alias="titre")
    leave_type: Optional[str] = Field(None, alias="type_conge")
    leave_type_other: Optional[str] = Field(None, alias="type_conge_autre")
    start_date: Optional[date] = Field(None, alias="date_depart")
    return_date: Optional[date] = Field(None, alias="date_retour")
    start_time: Optional[str] = Field(None, alias="heure_depart")
    return_time: Optional[str] = Field(None, alias="heure_retour")
    half_day: Optional[bool] = Field(None, alias="demi_journee")
    travel_expenses: Optional[Decimal] = Field(None, alias="frais_deplacement", ge=0)
    approval_manager1: Optional[bool] = Field(None, alias="approuve_responsable1")
    approval_manager2: Optional[bool] = Field(None, alias="approuve_responsable2")
    refusal_comment: Optional[str] = Field(None, alias="commentaire_refus")

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", populate_by_name=True)

    @field_validator("request_type")
    @classmethod
    def _type_not_null(cls, v):
        if v is None:
            raise ValueError("type_demande cannot be null")
        return v

    @field_validator("start_time", "return_time")
    @classmethod
    def _check_time(cls, v):
        if v and not TIME_RE.match(v):
            raise ValueError("time must use the HH:MM format")
        return v

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.return_date and self.return_date < self.start_date:
            raise ValueError("date_retour must not be before date_depart")
        return self


class DemandeIn(DemandeUpdate):
    employee_id: int = Field(..., alias="employe_id", gt=0)
    request_type: Literal[REQUEST_TYPES] = Field(..., alias="type_demande")


class DemandeStatusIn(_Schema):
    status: Literal[REQUEST_STATUSES] = Field(..., alias="statut")
    refusal_comment: Optional[str] = Field(None, alias="commentaire_refus")

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore", populate_by_name=True)


class ApprovalIn(_Schema):
    manager: Literal[1, 2]
    approved: bool
    comment: Optional[str] = None


# -----------------------------
# Visa dossiers
# -----------------------------
class VisaDossierIn(_Schema):
    employee_id: int = Field(..., gt=0)
    motif: str = Field(..., min_length=1, max_length=255)
    departure_date: date
    return_date: date

    @model_validator(mode="after")
    def _check_dates(self):
        if self.return_date < self.departure_date:
            raise ValueError("return_date must not be before departure_date")
        return self


class DossierStatusIn(_Schema):
    status: Literal[tuple(DOSSIER_STATUS_RANK)]
    visa_number: Optional[str] = Field(None, max_length=100)
    visa_valid_from: Optional[date] = None
    visa_valid_until: Optional[date] = None

    @model_validator(mode="after")
    def _check_visa(self):
        has_visa_fields = self.visa_number or self.visa_valid_from or self.visa_valid_until
        if has_visa_fields and self.status != DOSSIER_APPROVED:
            raise ValueError("visa fields can only be set when the dossier is approved")
        if self.visa_valid_from and self.visa_valid_until and self.visa_valid_until < self.visa_valid_from:
            raise ValueError("visa_valid_until must not be before visa_valid_from")
        return self


class VisaDocumentPatch(_Schema):
    status: Literal[DOC_MISSING, DOC_UPLOADED, DOC_RECEIVED_PHYSICAL]


class _GenerationIn(_Schema):
    employee_id: int = Field(..., gt=0)
    document_id: int = Field(..., gt=0)


class AttestationIn(_GenerationIn):
    signatory: Optional[str] = None
    place: Optional[str] = None


class InvitationIn(_GenerationIn):
    destination: str = Field(..., min_length=1)
    host_organisation: Optional[str] = None
    place: Optional[str] = None


class OrdreMissionIn(_GenerationIn):
    mission_objective: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    mission_start: date
    mission_end: date
    place: Optional[str] = None

    @model_validator(mode="after")
    def _check_dates(self):
        if self.mission_end < self.mission_start:
            raise ValueError("mission_end must not be before mission_start")
        return self


class DossierEmailIn(_Schema):
    dossier_id: int = Field(..., gt=0)


# -----------------------------
# Payslips
# -----------------------------
class PayslipDistributionIn(_Schema):
    period: str
    send_email: bool = False

    @field_validator("period")
    @classmethod
    def _check_period(cls, v):
        if not PERIOD_RE.match(v or ""):
            raise ValueError("period must use the YYYY-MM format")
        return v
