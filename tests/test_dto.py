"""Tests for application DTOs."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from grievdesk.config import Priority, TicketStatus
from grievdesk.sla.application import MetricsQueryDTO, TicketRecordDTO
from grievdesk.sla.domain import Ticket


class TestTicketRecordDTO:
    """Tests for ticket record parsing."""

    def test_camel_case_record(self):
        dto = TicketRecordDTO.model_validate({
            "issueId": 7,
            "createdAt": "2025-01-06T09:00:00",
            "firstResponseAt": "2025-01-06T10:00:00",
            "status": "In_Progress",
            "priority": "HIGH",
        })

        assert dto.id == "7"
        assert dto.status == TicketStatus.IN_PROGRESS
        assert dto.priority == Priority.HIGH
        assert dto.first_response_at == datetime(2025, 1, 6, 10)

    def test_from_orm_object(self):
        row = SimpleNamespace(
            id="T-9", created_at=datetime(2025, 1, 6, 9), status="closed",
            priority="low", first_response_at=None,
            resolved_at=datetime(2025, 1, 7, 9), closed_at=datetime(2025, 1, 7, 10)
        )
        dto = TicketRecordDTO.model_validate(row)
        assert dto.closed_at == datetime(2025, 1, 7, 10)

    @pytest.mark.parametrize("priority", [None, "", "  "])
    def test_missing_priority_defaults_to_medium(self, priority):
        dto = TicketRecordDTO(id="T-1", created_at=datetime(2025, 1, 6, 9), priority=priority)
        assert dto.priority == Priority.MEDIUM

    def test_unknown_priority_kept(self):
        dto = TicketRecordDTO(id="T-1", created_at=datetime(2025, 1, 6, 9), priority="urgent")
        assert dto.priority == "urgent"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            TicketRecordDTO(id="T-1", created_at=datetime(2025, 1, 6, 9), status="archived")

    def test_missing_created_at_rejected(self):
        with pytest.raises(ValidationError):
            TicketRecordDTO.model_validate({"id": "T-1"})

    def test_to_domain_normalizes_timezone(self):
        dto = TicketRecordDTO.model_validate({
            "id": "T-1",
            "createdAt": "2025-01-06T09:00:00+00:00",
        })
        ticket = dto.to_domain("Asia/Kolkata")

        assert isinstance(ticket, Ticket)
        assert ticket.created_at == datetime(2025, 1, 6, 14, 30)
        assert ticket.created_at.tzinfo is None


class TestMetricsQueryDTO:
    """Tests for metrics filters."""

    def test_inverted_range_rejected(self):
        with pytest.raises(ValidationError):
            MetricsQueryDTO(start_date=date(2025, 1, 7), end_date=date(2025, 1, 6))

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError):
            MetricsQueryDTO(priority="urgent")

    def test_matches(self):
        ticket = Ticket(id="T-1", created_at=datetime(2025, 1, 6, 23, 59), priority="high")
        query = MetricsQueryDTO(start_date=date(2025, 1, 6), end_date=date(2025, 1, 6))

        assert query.matches(ticket)
        assert not MetricsQueryDTO(priority="low").matches(ticket)
        assert not MetricsQueryDTO(start_date=date(2025, 1, 7)).matches(ticket)
        assert MetricsQueryDTO().matches(ticket)

    def test_unknown_priority_matches_medium(self):
        ticket = Ticket(id="T-1", created_at=datetime(2025, 1, 6, 9), priority="urgent")

        assert MetricsQueryDTO(priority="medium").matches(ticket)
        assert not MetricsQueryDTO(priority="high").matches(ticket)
