from pydantic import BaseModel


class PickupOrderFields(BaseModel):
    """Pickup order fields read from OCR text. Dates are ISO strings (YYYY-MM-DD)."""

    order_number: str | None
    issue_date: str | None
    scheduled_date: str | None
    loading_date: str | None
    unloading_date: str | None
    sender_name: str | None
    sender_address: str | None
    sender_city: str | None
    sender_email: str | None
    recipient_name: str | None
    recipient_address: str | None
    recipient_city: str | None
    recipient_email: str | None
    basin_code: str | None
    basin_description: str | None
    flow_type: str | None
    transport_type: str | None
    distance_km: float | None
    expected_quantity: float | None
    availability_date: str | None
    shipping_request_date: str | None


class KeyFieldConfidences(BaseModel):
    """Confidence (0-1) for each field that drives the overall score."""

    order_number: float
    issue_date: float
    sender_name: float
    recipient_name: float
    basin_code: float


class LLMExtractionResponse(BaseModel):
    """LLM response for pickup order extraction."""

    data: PickupOrderFields
    field_confidences: KeyFieldConfidences
    warnings: list[str]
