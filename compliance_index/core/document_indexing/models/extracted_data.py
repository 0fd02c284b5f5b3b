"""
Extraction payload models.

`extracted_data` is produced by upstream parsers and its shape varies by
document category. Each category gets its own variant; all share the
fields the serializers and metadata chunk read, and keep unknown keys.

Dependencies: pydantic
System role: Typed view over parser output
"""

import logging
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

PERMIT_CATEGORY = "npdes_permit"
LAB_DATA_CATEGORY = "lab_data"
DMR_CATEGORY = "dmr"


class DateRange(BaseModel):
    """Earliest/latest sample or reporting dates."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    earliest: str | None = None
    latest: str | None = None


class ParameterSummary(BaseModel):
    """Per-parameter sample count."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    canonical_name: str
    sample_count: int | str | None = None


class ExtractedDataBase(BaseModel):
    """Fields shared by every extraction payload."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    # Lab payloads routinely carry thousands of rows; they always take the
    # byte-budgeted serializer.
    always_summarize: ClassVar[bool] = False

    document_type: str | None = None
    permit_number: str | None = None
    permit_numbers: list[str] | None = None
    states: list[str] | None = None
    state: str | None = None
    date_range: DateRange | None = None
    summary: str | None = None
    parameter_summary: list[ParameterSummary] | None = None
    records: list[dict[str, Any]] | None = None
    total_rows: int | str | None = None
    records_total: int | None = None
    records_truncated: bool | None = None
    effective_date: str | None = None
    expiration_date: str | None = None
    outfall_count: int | str | None = None
    limit_count: int | str | None = None

    @field_validator("permit_numbers", "states", mode="before")
    @classmethod
    def _listify(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value if v is not None]
        return value

    @property
    def record_count(self) -> int:
        """Total records in the source payload, before any load-time truncation."""
        if self.records_total is not None:
            return self.records_total
        return len(self.records or [])


class PermitData(ExtractedDataBase):
    """NPDES permit extraction (limits, outfalls, effective dates)."""

    kind: Literal["permit"] = "permit"


class LabData(ExtractedDataBase):
    """Tabular lab-result extraction."""

    kind: Literal["lab_data"] = "lab_data"
    always_summarize: ClassVar[bool] = True


class DmrData(ExtractedDataBase):
    """Discharge monitoring report bundle extraction."""

    kind: Literal["dmr"] = "dmr"


class GenericData(ExtractedDataBase):
    """Any other category."""

    kind: Literal["generic"] = "generic"


ExtractedData = PermitData | LabData | DmrData | GenericData

_VARIANTS: dict[str, type[ExtractedDataBase]] = {
    PERMIT_CATEGORY: PermitData,
    LAB_DATA_CATEGORY: LabData,
    DMR_CATEGORY: DmrData,
}


def parse_extracted_data(category: str, raw: dict[str, Any]) -> ExtractedData:
    """
    Validate a raw payload into the variant for its category.

    Top-level fields that fail validation are dropped (and logged) rather
    than failing the whole payload: a malformed optional field must not
    block indexing of the rest.

    Args:
        category: Source document file_category
        raw: Parser payload

    Returns:
        ExtractedData: Category variant
    """
    model = _VARIANTS.get(category, GenericData)
    payload = {k: v for k, v in raw.items() if k != "kind"}
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        bad_fields = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        logger.warning(
            "%s:parse_extracted_data - Dropping invalid fields %s for category %s",
            __name__,
            sorted(bad_fields),
            category,
        )
        cleaned = {k: v for k, v in payload.items() if k not in bad_fields}
        return model.model_validate(cleaned)
