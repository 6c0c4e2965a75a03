"""Pydantic schemas for saved payment methods."""
from enum import StrEnum

from pydantic import ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from schemas.entity import Entity, EntityRequest


class PaymentMethodType(StrEnum):
    """Payment method kinds accepted by the backend."""

    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    E_WALLET = "E_WALLET"
    COD = "COD"


CARD_TYPES = frozenset({PaymentMethodType.CREDIT_CARD, PaymentMethodType.DEBIT_CARD})

# Detail fields that only make sense for a given type
_TYPE_FIELDS: dict[PaymentMethodType, tuple[str, ...]] = {
    PaymentMethodType.CREDIT_CARD: ("last_four_digits", "card_brand"),
    PaymentMethodType.DEBIT_CARD: ("last_four_digits", "card_brand"),
    PaymentMethodType.BANK_TRANSFER: ("bank_name", "account_number"),
    PaymentMethodType.E_WALLET: ("wallet_provider", "wallet_phone"),
    PaymentMethodType.COD: (),
}
_DETAIL_FIELDS = frozenset(f for fields in _TYPE_FIELDS.values() for f in fields)


class PaymentMethod(Entity):
    """A saved payment method. At most one per user is the default."""

    model_config = ConfigDict(alias_generator=to_camel)

    type: PaymentMethodType
    name: str
    last_four_digits: str | None = None
    card_brand: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    wallet_provider: str | None = None
    wallet_phone: str | None = None

    @property
    def is_card(self) -> bool:
        """True for credit and debit cards."""
        return self.type in CARD_TYPES


class PaymentMethodCreate(EntityRequest):
    """
    Schema for adding a payment method.

    Detail fields belonging to another payment type are dropped, so switching
    the type in a form never leaks stale card or bank details to the server.
    """

    type: PaymentMethodType
    name: str = Field(..., min_length=1)
    is_default: bool = False
    last_four_digits: str | None = Field(default=None, pattern=r"^\d{4}$")
    card_brand: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    wallet_provider: str | None = None
    wallet_phone: str | None = None

    @model_validator(mode="after")
    def drop_foreign_details(self) -> "PaymentMethodCreate":
        """Unset detail fields that do not apply to the selected type."""
        allowed = _TYPE_FIELDS[self.type]
        for field in _DETAIL_FIELDS - set(allowed):
            if field in self.model_fields_set:
                setattr(self, field, None)
                self.model_fields_set.discard(field)
        return self


class PaymentMethodUpdate(EntityRequest):
    """Schema for updating a payment method. All fields are optional."""

    type: PaymentMethodType | None = None
    name: str | None = None
    is_default: bool | None = None
    last_four_digits: str | None = Field(default=None, pattern=r"^\d{4}$")
    card_brand: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    wallet_provider: str | None = None
    wallet_phone: str | None = None
