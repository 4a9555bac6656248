"""Assembly of the final record: confidence aggregation and placeholder filling."""
import uuid
from datetime import datetime

from src.core.pickup_order import GENERATED_ORDER_PREFIX, PLACEHOLDER, ExtractedPickupOrderData

BASE_CONFIDENCE = 95.0

# Points lost when a key field is missing, scaled by (1 - field confidence).
KEY_FIELD_WEIGHTS = {
    "order_number": 15,
    "issue_date": 10,
    "sender_name": 15,
    "recipient_name": 15,
    "basin_code": 20,
}


def aggregate_confidence(field_confidences: dict[str, float], ocr_confidence: float | None = None) -> float:
    """Overall 0-100 score from per-field confidences (0-1) and OCR word confidence (0-100)."""
    score = BASE_CONFIDENCE
    for field, weight in KEY_FIELD_WEIGHTS.items():
        confidence = min(max(field_confidences.get(field, 0.0), 0.0), 1.0)
        score -= weight * (1.0 - confidence)
    if ocr_confidence is not None:
        score *= ocr_confidence / 100.0
    return round(min(max(score, 0.0), 100.0), 1)


def generate_order_number(extracted_at: datetime) -> str:
    """Placeholder order number, unique even for extractions in the same millisecond."""
    millis = int(extracted_at.timestamp() * 1000)
    return f"{GENERATED_ORDER_PREFIX}{millis}-{uuid.uuid4().hex[:6].upper()}"


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def assemble_record(
    values: dict, confidence: float, extracted_at: datetime
) -> tuple[ExtractedPickupOrderData, list[str]]:
    """Build a structurally complete record, filling sentinels for unreadable required fields.

    Returns the record and one warning per substituted field.
    """
    fields = {
        name: value for name, value in values.items()
        if name in ExtractedPickupOrderData.model_fields and not _blank(value)
    }
    warnings = []

    if "order_number" not in fields:
        fields["order_number"] = generate_order_number(extracted_at)
        warnings.append(f"Field 'order_number' replaced with generated placeholder {fields['order_number']}")
    if "issue_date" not in fields:
        fields["issue_date"] = extracted_at.date()
        warnings.append("Field 'issue_date' defaulted to the extraction date")
    for name in ("sender_name", "recipient_name", "basin_code"):
        if name not in fields:
            fields[name] = PLACEHOLDER
            warnings.append(f"Field '{name}' replaced with placeholder {PLACEHOLDER}")

    fields["confidence"] = confidence
    return ExtractedPickupOrderData(**fields), warnings
