from typing import Any, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

PREBUILT_INVOICE_MODEL = "prebuilt-invoice"


class _WireModel(BaseModel):
    # Wire names are the service's camelCase names
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        protected_namespaces=(),
    )


class AnalysisRequest(_WireModel):
    file_path: str
    model_id: str = PREBUILT_INVOICE_MODEL


class Page(_WireModel):
    page_number: int = Field(ge=1)
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    unit: str | None = None  # "inch" for PDF/TIFF, "pixel" for images


class CurrencyValue(_WireModel):
    model_config = ConfigDict(extra="allow")

    amount: float | None = None
    currency_symbol: str | None = None
    currency_code: str | None = None


class FieldValue(_WireModel):
    """
    One extracted field. `type` says which value member is populated.

    Members the service returns that are not modelled here (boundingRegions,
    spans, newer value kinds) are kept as extras so they survive serialization.
    """

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    content: str | None = None
    confidence: float | None = None

    value_string: str | None = None
    value_number: float | None = None
    value_integer: int | None = None
    value_date: str | None = None
    value_time: str | None = None
    value_phone_number: str | None = None
    value_country_region: str | None = None
    value_selection_mark: str | None = None
    value_selection_group: list[str] | None = None
    value_boolean: bool | None = None
    value_signature: str | None = None
    value_currency: CurrencyValue | None = None
    value_address: dict[str, Any] | None = None
    value_object: dict[str, Optional["FieldValue"]] | None = None
    value_array: list["FieldValue"] | None = None

    @property
    def value(self) -> Any:
        attr = VALUE_ATTRIBUTES.get(self.type or "")
        return getattr(self, attr) if attr else None


VALUE_ATTRIBUTES = {
    "string": "value_string",
    "number": "value_number",
    "integer": "value_integer",
    "date": "value_date",
    "time": "value_time",
    "phoneNumber": "value_phone_number",
    "countryRegion": "value_country_region",
    "selectionMark": "value_selection_mark",
    "selectionGroup": "value_selection_group",
    "boolean": "value_boolean",
    "signature": "value_signature",
    "currency": "value_currency",
    "address": "value_address",
    "object": "value_object",
    "array": "value_array",
}


class KeyValueElement(_WireModel):
    content: str = ""


class KeyValuePair(_WireModel):
    key: KeyValueElement
    value: KeyValueElement | None = None
    confidence: float | None = None


class AnalysisResult(_WireModel):
    model_id: str
    pages: list[Page] = Field(default_factory=list)
    fields: dict[str, FieldValue | None] = Field(default_factory=dict)
    key_value_pairs: list[KeyValuePair] = Field(default_factory=list)
    doc_type: str | None = None
    document_confidence: float | None = None
    document_count: int = 0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "AnalysisResult":
        """
        Decode an analyzeResult payload (camelCase JSON as returned by the service).

        Only the first detected document contributes `fields`; any further
        documents are dropped.
        """
        documents = payload.get("documents") or []
        first = documents[0] if documents else {}

        if len(documents) > 1:
            logger.warning(
                "Service detected more than one document; keeping the first",
                document_count=len(documents),
                discarded=len(documents) - 1,
            )

        return cls.model_validate({
            "modelId": payload.get("modelId") or "",
            "pages": payload.get("pages") or [],
            "fields": first.get("fields") or {},
            "keyValuePairs": payload.get("keyValuePairs") or [],
            "docType": first.get("docType"),
            "documentConfidence": first.get("confidence"),
            "documentCount": len(documents),
        })

    def fields_dict(self) -> dict[str, Any]:
        """The field mapping in wire form with every null value removed."""
        dumped = {
            name: field.model_dump(mode="json", by_alias=True, exclude_none=True)
            for name, field in self.fields.items()
            if field is not None
        }
        return prune_nulls(dumped)


def prune_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: prune_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [prune_nulls(v) for v in value if v is not None]
    return value
