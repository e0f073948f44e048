"""Unit tests for the document lifecycle state machine"""

import pytest

from domain.documents import (
    DocumentStatus,
    DocumentType,
    can_transition,
    get_allowed_transitions,
    ALLOWED_TRANSITIONS,
)


class TestDocumentStatusStateMachine:
    """Test DocumentStatus enum and state transition validation"""

    def test_document_status_enum_values(self):
        """Statuses are stored as lowercase strings"""
        assert DocumentStatus.PENDING_UPLOAD.value == "pending_upload"
        assert DocumentStatus.PENDING.value == "pending"
        assert DocumentStatus.APPROVED.value == "approved"
        assert DocumentStatus.REJECTED.value == "rejected"
        assert DocumentStatus.DELETED.value == "deleted"

    def test_document_type_enum_values(self):
        assert {t.value for t in DocumentType} == {"eps", "pension", "arl", "aportes"}

    def test_initial_state_transition(self):
        """New documents always start in PENDING_UPLOAD"""
        assert can_transition(None, DocumentStatus.PENDING_UPLOAD) is True
        assert can_transition(None, DocumentStatus.PENDING) is False
        assert can_transition(None, DocumentStatus.DELETED) is False

    def test_pending_upload_to_pending(self):
        """PENDING_UPLOAD → PENDING (upload confirmed)"""
        assert can_transition(DocumentStatus.PENDING_UPLOAD, DocumentStatus.PENDING) is True

    def test_pending_upload_cannot_be_reviewed(self):
        assert can_transition(DocumentStatus.PENDING_UPLOAD, DocumentStatus.APPROVED) is False
        assert can_transition(DocumentStatus.PENDING_UPLOAD, DocumentStatus.REJECTED) is False

    def test_pending_can_be_reconfirmed(self):
        """PENDING → PENDING lets a client repeat completion"""
        assert can_transition(DocumentStatus.PENDING, DocumentStatus.PENDING) is True

    def test_pending_to_review_outcomes(self):
        assert can_transition(DocumentStatus.PENDING, DocumentStatus.APPROVED) is True
        assert can_transition(DocumentStatus.PENDING, DocumentStatus.REJECTED) is True

    def test_reviewed_documents_are_stable(self):
        """APPROVED/REJECTED only move to DELETED"""
        for status in (DocumentStatus.APPROVED, DocumentStatus.REJECTED):
            assert get_allowed_transitions(status) == [DocumentStatus.DELETED]
            assert can_transition(status, DocumentStatus.PENDING) is False

    @pytest.mark.parametrize("status", [
        DocumentStatus.PENDING_UPLOAD,
        DocumentStatus.PENDING,
        DocumentStatus.APPROVED,
        DocumentStatus.REJECTED,
    ])
    def test_every_live_status_can_be_deleted(self, status):
        assert can_transition(status, DocumentStatus.DELETED) is True

    def test_deleted_is_terminal(self):
        """No transition leaves DELETED"""
        assert ALLOWED_TRANSITIONS[DocumentStatus.DELETED] == []
        for status in DocumentStatus:
            assert can_transition(DocumentStatus.DELETED, status) is False

    def test_all_statuses_have_transition_rules(self):
        for status in DocumentStatus:
            assert status in ALLOWED_TRANSITIONS
