"""
Card records stored in the vault.

A ``CreditCard`` is serialized to canonical JSON bytes (sorted keys) before
tokenization and encryption, so the same card always yields the same token.
"""
import re
from typing import Optional

import orjson
from pydantic import BaseModel, Field, field_validator

_NON_DIGITS = re.compile(r"[\s-]")


def luhn_checksum(number: str) -> bool:
    """Return True if ``number`` passes the Luhn (mod 10) check."""
    total = 0
    for i, digit in enumerate(reversed(number)):
        n = int(digit)
        if i % 2 == 1:
            n *= 2
            if n > 9:
                n -= 9
        total += n
    return total % 10 == 0


class CreditCard(BaseModel):
    """Payment card record."""

    number: str = Field(repr=False)
    cardholder_name: str
    expiration_month: str
    expiration_year: str
    brand: Optional[str] = None
    security_code: Optional[str] = Field(default=None, repr=False)

    model_config = {"frozen": True}

    @field_validator("number")
    @classmethod
    def validate_number(cls, v: str) -> str:
        """Strip separators and check length and Luhn checksum."""
        v = _NON_DIGITS.sub("", v)
        if not v.isdigit() or not 12 <= len(v) <= 19:
            raise ValueError("card number must be 12 to 19 digits")
        if not luhn_checksum(v):
            raise ValueError("card number fails Luhn checksum")
        return v

    @field_validator("expiration_month")
    @classmethod
    def validate_month(cls, v: str) -> str:
        if not v.isdigit() or not 1 <= int(v) <= 12:
            raise ValueError("expiration month must be 01 to 12")
        return f"{int(v):02d}"

    @field_validator("expiration_year")
    @classmethod
    def validate_year(cls, v: str) -> str:
        if not v.isdigit() or len(v) not in (2, 4):
            raise ValueError("expiration year must have 2 or 4 digits")
        return v

    @field_validator("security_code")
    @classmethod
    def validate_security_code(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and (not v.isdigit() or len(v) not in (3, 4)):
            raise ValueError("security code must have 3 or 4 digits")
        return v

    @property
    def masked_number(self) -> str:
        """Card number with all but the last four digits hidden."""
        return f"{'*' * (len(self.number) - 4)}{self.number[-4:]}"

    def __str__(self) -> str:
        return f"<CreditCard {self.masked_number} {self.cardholder_name}>"

    def to_bytes(self) -> bytes:
        """Canonical JSON encoding, stable across processes."""
        return orjson.dumps(self.model_dump(), option=orjson.OPT_SORT_KEYS)

    @classmethod
    def from_bytes(cls, data: bytes) -> "CreditCard":
        """Rebuild a card from :meth:`to_bytes` output."""
        return cls.model_validate(orjson.loads(data))
