from datetime import date, timedelta

from src.core.pickup_order import ExtractedPickupOrderData, ReviewAssessment

REQUIRED_WEIGHT = 2
OPTIONAL_WEIGHT = 1
OPTIONAL_FIELDS = [
    "distance_km", "flow_type", "sender_address", "recipient_address",
    "availability_date", "shipping_request_date",
]
STALE_AFTER = timedelta(days=365)


def _quality_score(data: ExtractedPickupOrderData, placeholders: set[str]) -> int:
    score = 0
    max_score = 0

    for field in ("order_number", "sender_name", "recipient_name", "basin_code", "issue_date"):
        max_score += REQUIRED_WEIGHT
        if field not in placeholders:
            score += REQUIRED_WEIGHT

    for field in OPTIONAL_FIELDS:
        max_score += OPTIONAL_WEIGHT
        value = getattr(data, field)
        if value is not None and str(value).strip():
            score += OPTIONAL_WEIGHT

    # Bonus for a confident read
    max_score += 2
    if data.confidence > 90:
        score += 2
    elif data.confidence > 70:
        score += 1

    return round(score / max_score * 100)


def assess(
    data: ExtractedPickupOrderData,
    review_threshold: float = 80,
    today: date | None = None,
    defaulted_issue_date: bool = False,
) -> ReviewAssessment:
    """Build the human-review checklist for an extracted record.

    `defaulted_issue_date` marks an issue date that was filled in rather than read.
    """
    today = today or date.today()
    placeholders = set(data.placeholder_fields())
    if defaulted_issue_date:
        placeholders.add("issue_date")

    suggestions = []
    if "order_number" in placeholders:
        suggestions.append("Order number not detected: enter it manually")
    if data.confidence < review_threshold:
        suggestions.append(f"Low extraction confidence ({data.confidence:g}): check every extracted field")
    if "sender_name" in placeholders:
        suggestions.append("Sender name not detected")
    if "recipient_name" in placeholders:
        suggestions.append("Recipient name not detected")
    if "basin_code" in placeholders:
        suggestions.append("Basin code not detected")
    if "issue_date" in placeholders or data.issue_date < today - STALE_AFTER:
        suggestions.append("Suspicious issue date: check the date format")

    fields_to_review = sorted(placeholders)
    return ReviewAssessment(
        needs_review=bool(suggestions),
        fields_to_review=fields_to_review,
        suggestions=suggestions,
        quality_score=_quality_score(data, placeholders),
    )
