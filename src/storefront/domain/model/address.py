"""Shipping address value — owned by the user profile, referenced by checkout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from storefront.domain.exceptions import ValidationError
from storefront.domain.model import fields


@dataclass(frozen=True)
class ShippingAddress:
    full_name: str
    line1: str
    district: str
    province: str = ""
    postal_code: str = ""
    line2: str = ""
    id: str | None = None

    def validate(self) -> None:
        """Required fields before an address may be saved server-side."""
        if not self.full_name.strip() or not self.line1.strip() or not self.district.strip():
            raise ValidationError("Name, street address and district are required")

    def to_raw(self) -> dict:
        """Canonical JSON shape (also what ``@shipping_destination`` stores)."""
        raw = {
            "fullName": self.full_name,
            "line1": self.line1,
            "line2": self.line2,
            "district": self.district,
            "province": self.province,
            "postalCode": self.postal_code,
        }
        if self.id:
            raw["_id"] = self.id
        return raw

    def to_profile_payload(self) -> dict:
        """Body for ``/api/users/shipping``, which speaks the profile form's field names."""
        first, _, last = self.full_name.strip().partition(" ")
        return {
            "firstName": first,
            "lastName": last,
            "street": self.line1,
            "apt": self.line2,
            "district": self.district,
            "province": self.province,
            "zip": self.postal_code,
        }

    @staticmethod
    def from_raw(raw: Mapping[str, Any]) -> ShippingAddress:
        """Accept both the canonical shape and the profile form's shape."""
        full_name = raw.get("fullName") or " ".join(
            part for part in (raw.get("firstName"), raw.get("lastName")) if part
        )
        return ShippingAddress(
            id=fields.id_of(raw, fields.ADDRESS_ID),
            full_name=str(full_name or ""),
            line1=str(raw.get("line1") or raw.get("street") or ""),
            line2=str(raw.get("line2") or raw.get("apt") or ""),
            district=str(raw.get("district") or raw.get("city") or ""),
            province=str(raw.get("province") or ""),
            postal_code=str(raw.get("postalCode") or raw.get("zip") or ""),
        )
