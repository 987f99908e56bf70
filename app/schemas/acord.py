"""Typed view of an extracted ACORD 25 certificate.

Every field is optional: the model fills what it can read.  Unknown keys are
kept so the typed view never loses data the model returned.
"""

import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

# One amount: optional dollar sign, digits with thousands separators, optional cents
_AMOUNT_RE = re.compile(r"^\$?\s*(\d[\d,]*(?:\.\d+)?)$")


class _Relaxed(BaseModel):
    model_config = {
        "extra": "allow",
        "populate_by_name": True,
        "coerce_numbers_to_str": True,
    }


class CertificateInformation(_Relaxed):
    certificate_holder: str | None = None
    certificate_number: str | None = None
    revision_number: str | None = None
    issue_date: str | None = None


class Insurer(_Relaxed):
    insurer_letter: str | None = None
    insurer_name: str | None = None
    naic_code: str | None = None


class PolicyInformation(_Relaxed):
    policy_type: str | None = None
    policy_number: str | None = None
    effective_date: str | None = None
    expiry_date: str | None = None


class Coverage(_Relaxed):
    limit_type: str | None = None
    limit_value: float | None = None

    @field_validator("limit_value", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        """Accept dollar strings such as ``"$1,000,000"``; drop anything unparseable."""
        if value is None or isinstance(value, (int, float)):
            return value
        if isinstance(value, str):
            match = _AMOUNT_RE.match(value.strip())
            if match:
                return float(match.group(1).replace(",", ""))
        return None


class Policy(_Relaxed):
    policy_information: PolicyInformation | None = None
    insurer_letter: str | None = None
    coverages: list[Coverage] = Field(default_factory=list)

    @field_validator("coverages", mode="before")
    @classmethod
    def _null_coverages_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class PrimaryDetails(_Relaxed):
    full_name: str | None = None
    email_address: str | None = None
    doing_business_as: str | None = None


class ContactInformation(_Relaxed):
    phone_number: str | None = None
    fax_number: str | None = None
    license_number: str | None = None


class AddressDetails(_Relaxed):
    address_line_1: str | None = None
    address_line_2: str | None = None
    address_line_3: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class ProducerInformation(_Relaxed):
    primary_details: PrimaryDetails | None = None
    contact_information: ContactInformation | None = None
    address_details: AddressDetails | None = None


class AcordCertificate(_Relaxed):
    """Structured ACORD 25 extraction result."""

    certificate_information: CertificateInformation | None = None
    insurers: list[Insurer] = Field(default_factory=list)
    policies: list[Policy] = Field(default_factory=list)
    producer_information: ProducerInformation | None = None

    @field_validator("insurers", "policies", mode="before")
    @classmethod
    def _null_list_to_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @classmethod
    def from_extraction(cls, data: dict[str, Any] | None) -> "AcordCertificate | None":
        """Typed view of raw model output, or ``None`` when it does not fit."""
        if not data:
            return None
        try:
            return cls.model_validate(data)
        except ValidationError:
            return None

    def summary(self) -> dict[str, Any]:
        info = self.certificate_information or CertificateInformation()
        return {
            "certificate_number": info.certificate_number,
            "certificate_holder": info.certificate_holder,
            "issue_date": info.issue_date,
            "insurers": len(self.insurers),
            "policies": len(self.policies),
            "coverages": sum(len(p.coverages) for p in self.policies),
        }
