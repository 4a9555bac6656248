from datetime import date

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Sentinel written into required fields the engine could not recover.
PLACEHOLDER = "UNKNOWN"
GENERATED_ORDER_PREFIX = "AUTO-"

REQUIRED_FIELDS = ["order_number", "issue_date", "sender_name", "recipient_name", "basin_code"]


class ExtractedPickupOrderData(BaseModel):
    """Structured pickup order ("buono di ritiro") extracted from a PDF.

    Always structurally complete: required fields hold a sentinel when the engine could
    not read them, so callers must check `confidence` and the review assessment rather
    than test for missing values. Serializes with camelCase keys via `by_alias=True`.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    order_number: str = Field(min_length=1)
    issue_date: date
    scheduled_date: date | None = None
    loading_date: date | None = None
    unloading_date: date | None = None

    sender_name: str = Field(min_length=1)
    sender_address: str | None = None
    sender_city: str | None = None
    sender_email: str | None = None

    recipient_name: str = Field(min_length=1)
    recipient_address: str | None = None
    recipient_city: str | None = None
    recipient_email: str | None = None

    basin_code: str = Field(min_length=1)
    basin_description: str | None = None
    flow_type: str | None = None
    transport_type: str | None = None

    distance_km: float | None = Field(default=None, ge=0)
    expected_quantity: float | None = Field(default=None, ge=0)
    availability_date: date | None = None
    shipping_request_date: date | None = None

    confidence: float = Field(ge=0, le=100)

    def has_generated_order_number(self) -> bool:
        return self.order_number.startswith(GENERATED_ORDER_PREFIX)

    def placeholder_fields(self) -> list[str]:
        """Required fields that hold a sentinel instead of a recognized value."""
        fields = [
            name for name in ("sender_name", "recipient_name", "basin_code")
            if getattr(self, name) == PLACEHOLDER
        ]
        if self.has_generated_order_number():
            fields.insert(0, "order_number")
        return fields


class ReviewAssessment(BaseModel):
    """Human-review checklist and completeness score for one extraction."""

    needs_review: bool
    fields_to_review: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    quality_score: int = Field(ge=0, le=100)


class ExtractionResult(BaseModel):
    """Result of the PDF extraction process."""

    data: ExtractedPickupOrderData
    field_confidences: dict[str, float] = Field(default_factory=dict)
    raw_ocr_text: str = ""
    warnings: list[str] = Field(default_factory=list)
    review: ReviewAssessment | None = None
