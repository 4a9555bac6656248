import logging
from datetime import date

import opik

from src.core.errors import ExtractionFailed
from src.core.llm_responses import LLMExtractionResponse
from src.services.llm.base import LLMService
from src.services.parsing.base import KEY_FIELDS, FieldParser, ParsedFields
from src.services.prompt_store.base import PromptStore

logger = logging.getLogger("pickup_intake.parsing")

DATE_FIELDS = {
    "issue_date", "scheduled_date", "loading_date", "unloading_date",
    "availability_date", "shipping_request_date",
}
NUMBER_FIELDS = {"distance_km", "expected_quantity"}


class LLMFieldParser(FieldParser):
    """Reads pickup order fields by asking an LLM for structured output over the OCR text."""

    def __init__(self, llm: LLMService, prompt_store: PromptStore):
        self.llm = llm
        self.prompt_store = prompt_store

    @opik.track(name="llm_parse_fields")
    def parse(self, text: str) -> ParsedFields:
        messages = [
            {"role": "system", "content": self.prompt_store.get_and_render("extract", "system")},
            {"role": "user", "content": self.prompt_store.get_and_render("extract", "user", {"ocr_text": text})},
        ]
        try:
            response = self.llm.structured_output(messages, LLMExtractionResponse)
        except Exception as e:
            raise ExtractionFailed(f"backend unavailable: field extraction model failed: {e}") from e

        values = {}
        warnings = list(response.warnings)
        for field, value in response.data.model_dump().items():
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if field in DATE_FIELDS:
                try:
                    value = date.fromisoformat(str(value).strip())
                except ValueError:
                    warnings.append(f"Field '{field}' has unreadable date {value!r}")
                    continue
            elif field in NUMBER_FIELDS:
                if value < 0:
                    warnings.append(f"Field '{field}' is negative ({value}), ignored")
                    continue
            else:
                value = str(value).strip()
            values[field] = value

        confidences = {
            field: min(max(conf, 0.0), 1.0) if field in values else 0.0
            for field, conf in response.field_confidences.model_dump().items()
        }
        for field in KEY_FIELDS:
            if field not in values:
                warnings.append(f"Field '{field}' not found in document text")

        logger.debug(f"LLM parser returned {len(values)} fields")
        return ParsedFields(values=values, field_confidences=confidences, warnings=warnings)
