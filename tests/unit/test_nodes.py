"""Unit tests for the intake graph nodes and routing functions."""
from datetime import date
from unittest.mock import MagicMock

import pytest

from src.core.errors import ExtractionFailed, PersistenceFailed
from src.core.pickup_order import ExtractedPickupOrderData, ExtractionResult
from src.core.upload import AdmissionProfile, UploadCandidate
from src.nodes.admit import AdmitNode
from src.nodes.base import BaseNode
from src.nodes.check_format import CheckFormatNode
from src.nodes.extract import ExtractNode
from src.nodes.persist import PersistNode
from src.nodes.review import ReviewNode
from src.services.storage.local import LocalFileStorage
from src.workflow import (
    should_continue_after_admit,
    should_continue_after_check_format,
    should_continue_after_extract,
    should_continue_after_persist,
)


def _state(content=b"%PDF-1.4 body", mime_type="application/pdf", profile=None, **extra) -> dict:
    state = {
        "candidate": UploadCandidate(content=content, mime_type=mime_type, original_name="buono.pdf"),
        "requester_id": "user-42",
        "batch_size": 1,
        "profile": profile or AdmissionProfile.document(),
        "trajectory": [],
    }
    state.update(extra)
    return state


def _result(confidence=95.0, issue_date_confidence=1.0) -> ExtractionResult:
    data = ExtractedPickupOrderData(
        order_number="925511058895",
        issue_date=date.today(),
        sender_name="CC DOMUS RICYCLE",
        recipient_name="CSS ECOLOGISTIC SPA",
        basin_code="2002048",
        confidence=confidence,
    )
    return ExtractionResult(data=data, field_confidences={"issue_date": issue_date_confidence})


class TestBaseNode:
    def test_subclass_without_name_fails(self):
        with pytest.raises(TypeError):
            class NoName(BaseNode):
                def __call__(self, state):
                    return {}

    def test_visited_appends_name(self):
        assert AdmitNode().visited({"trajectory": ["x"]}) == ["x", "admit"]


class TestAdmitNode:
    def test_admits_pdf(self):
        result = AdmitNode()(_state())
        assert result["admitted"] is True
        assert result["trajectory"] == ["admit"]

    def test_rejects_wrong_type(self):
        result = AdmitNode()(_state(mime_type="image/png"))
        assert result["admitted"] is False
        assert result["rejection_code"] == "unsupported_type"
        assert result["reason"].startswith("unsupported type")


class TestPersistNode:
    @pytest.mark.asyncio
    async def test_stores_file(self, tmp_path):
        node = PersistNode(LocalFileStorage(tmp_path, clock=lambda: 1.0))
        result = await node(_state(trajectory=["admit"]))

        assert result["storage_key"] == "1000_user-42_buono.pdf"
        assert result["accepted_file"].path == tmp_path / "orders" / "1000_user-42_buono.pdf"
        assert result["trajectory"] == ["admit", "persist"]

    @pytest.mark.asyncio
    async def test_failure_sets_error_stage(self):
        storage = MagicMock()
        storage.name_and_persist.side_effect = PersistenceFailed(OSError("disk full"), storage_key="1000_x_buono.pdf")

        result = await PersistNode(storage)(_state())

        assert result["error_stage"] == "persist"
        assert result["storage_key"] == "1000_x_buono.pdf"
        assert "disk full" in result["reason"]
        assert "accepted_file" not in result


class TestCheckFormatNode:
    def test_valid_pdf(self):
        assert CheckFormatNode()(_state())["format_valid"] is True

    def test_missing_header(self):
        result = CheckFormatNode()(_state(content=b"", storage_key="1000_user-42_buono.pdf"))
        assert result["format_valid"] is False
        assert "1000_user-42_buono.pdf" in result["reason"]
        assert "not a PDF" in result["reason"]


class TestExtractNode:
    @pytest.mark.asyncio
    async def test_sets_extraction(self):
        expected = _result()

        async def run(pdf_bytes):
            return expected

        result = await ExtractNode(run)(_state())
        assert result["extraction"] is expected
        assert result["trajectory"] == ["extract"]

    @pytest.mark.asyncio
    async def test_failure_carries_storage_key(self):
        async def run(pdf_bytes):
            raise ExtractionFailed("corrupt document: no pages")

        result = await ExtractNode(run)(_state(storage_key="1000_user-42_buono.pdf"))

        assert result["error_stage"] == "extract"
        assert result["reason"] == "[extract] corrupt document: no pages (file: 1000_user-42_buono.pdf)"


class TestReviewNode:
    def test_attaches_assessment(self):
        result = ReviewNode()(_state(extraction=_result()))
        review = result["extraction"].review
        assert review is not None
        assert not review.needs_review

    def test_low_confidence_needs_review(self):
        result = ReviewNode(review_threshold=90)(_state(extraction=_result(confidence=85.0)))
        assert result["extraction"].review.needs_review

    def test_defaulted_issue_date_is_flagged(self):
        result = ReviewNode()(_state(extraction=_result(issue_date_confidence=0.0)))
        assert "issue_date" in result["extraction"].review.fields_to_review


class TestRouting:
    def test_after_admit(self):
        assert should_continue_after_admit({"admitted": True}) == "persist"
        assert should_continue_after_admit({"admitted": False}) == "report"

    def test_after_persist_document(self):
        assert should_continue_after_persist(_state()) == "check_format"

    def test_after_persist_photo_stops(self):
        assert should_continue_after_persist(_state(profile=AdmissionProfile.photo())) == "report"

    def test_after_persist_error(self):
        assert should_continue_after_persist(_state(error_stage="persist")) == "report"

    def test_after_check_format(self):
        assert should_continue_after_check_format({"format_valid": True}) == "extract"
        assert should_continue_after_check_format({"format_valid": False}) == "report"

    def test_after_extract(self):
        assert should_continue_after_extract({"extraction": _result()}) == "review"
        assert should_continue_after_extract({"error_stage": "extract"}) == "report"
