from typing import Mapping

from pydantic import BaseModel

from ..models.invoice import FieldValue


class InvoiceHeadline(BaseModel):
    vendor: str | None = None
    invoice_number: str | None = None
    invoice_date: str | None = None
    total: float | None = None
    currency: str | None = None
    customer: str | None = None  # CustomerName, falling back to BillingAddressRecipient
    line_items: int = 0
    confidence: float | None = None

    @classmethod
    def from_fields(cls, fields: Mapping[str, FieldValue | None], confidence: float | None = None) -> "InvoiceHeadline":
        def get_field_content(field_name):
            field = fields.get(field_name)
            if field is None:
                return None
            if field.content:
                return field.content
            if field.value is not None:
                return str(field.value)
            return None

        total = None
        currency = get_field_content("CurrencyCode")
        invoice_total = fields.get("InvoiceTotal")
        if invoice_total is not None and invoice_total.value_currency is not None:
            total = invoice_total.value_currency.amount
            currency = currency or invoice_total.value_currency.currency_code
        elif invoice_total is not None and invoice_total.value_number is not None:
            total = invoice_total.value_number

        items = fields.get("Items")
        line_items = len(items.value_array or []) if items is not None else 0

        return cls(
            vendor=get_field_content("VendorName"),
            invoice_number=get_field_content("InvoiceId"),
            invoice_date=get_field_content("InvoiceDate"),
            total=total,
            currency=currency,
            customer=get_field_content("CustomerName") or get_field_content("BillingAddressRecipient"),
            line_items=line_items,
            confidence=confidence,
        )
