from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.exchange.app.dto.match_dto import DirectMatchResult, TicketMatchInfo
from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAction, AdminAuditLog
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.driving_adapter.schema.ticket_request_schema import (
    TicketRequestResponse,
)


class InitiateMatchRequest(BaseModel):
    initiator_ticket_id: UtilsUUID7
    matched_ticket_id: UtilsUUID7
    notes: Optional[str] = None


class DirectMatchRequest(BaseModel):
    target_ticket_id: UtilsUUID7
    section_type: Optional[SectionType] = None
    game_id: Optional[UtilsUUID7] = None  # only needed against a buy request with no game
    notes: Optional[str] = None


class MatchNotesRequest(BaseModel):
    notes: Optional[str] = None


class CancelMatchRequest(BaseModel):
    reason: Optional[str] = None


class MatchHistoryEntryResponse(BaseModel):
    status: MatchStatus
    changed_by: Optional[UtilsUUID7] = None
    timestamp: datetime
    notes: Optional[str] = None


class MatchResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'initiator_ticket_id': '01936d8f-5e73-7c4e-a9c5-000000000001',
                'matched_ticket_id': '01936d8f-5e73-7c4e-a9c5-000000000002',
                'status': 'initiated',
                'history': [],
                'expires_at': None,
                'created_at': '2025-01-10T10:30:00Z',
            }
        },
    }

    id: UtilsUUID7
    initiator_ticket_id: UtilsUUID7
    matched_ticket_id: UtilsUUID7
    status: MatchStatus
    history: List[MatchHistoryEntryResponse]
    expires_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, match: Match) -> 'MatchResponse':
        return cls(
            id=match.id,
            initiator_ticket_id=match.initiator_ticket_id,
            matched_ticket_id=match.matched_ticket_id,
            status=match.status,
            history=[
                MatchHistoryEntryResponse(
                    status=entry.status,
                    changed_by=entry.changed_by,
                    timestamp=entry.timestamp,
                    notes=entry.notes,
                )
                for entry in match.history
            ],
            expires_at=match.expires_at,
            created_at=match.created_at,
            updated_at=match.updated_at,
        )


class DirectMatchResponse(BaseModel):
    match: MatchResponse
    created_ticket: TicketRequestResponse
    target_ticket: TicketRequestResponse

    @classmethod
    def from_dto(cls, result: DirectMatchResult) -> 'DirectMatchResponse':
        return cls(
            match=MatchResponse.from_entity(result.match),
            created_ticket=TicketRequestResponse.from_entity(result.created_ticket),
            target_ticket=TicketRequestResponse.from_entity(result.target_ticket.redacted()),
        )


class TicketMatchInfoResponse(BaseModel):
    ticket: TicketRequestResponse
    match: Optional[MatchResponse] = None
    awaiting_my_action: bool

    @classmethod
    def from_dto(cls, info: TicketMatchInfo) -> 'TicketMatchInfoResponse':
        return cls(
            ticket=TicketRequestResponse.from_entity(info.ticket),
            match=MatchResponse.from_entity(info.match) if info.match else None,
            awaiting_my_action=info.awaiting_my_action,
        )


class NotificationResponse(BaseModel):
    id: UtilsUUID7
    type: MatchEventType
    title: str
    message: str
    match_id: Optional[UtilsUUID7] = None
    is_read: bool
    created_at: datetime

    @classmethod
    def from_entity(cls, notification: Notification) -> 'NotificationResponse':
        return cls(
            id=notification.id,
            type=notification.type,
            title=notification.title,
            message=notification.message,
            match_id=notification.match_id,
            is_read=notification.is_read,
            created_at=notification.created_at,
        )


class AdminAuditLogResponse(BaseModel):
    id: UtilsUUID7
    admin_id: UtilsUUID7
    action: AdminAction
    target_type: str
    target_id: UtilsUUID7
    affected_user_ids: List[UtilsUUID7]
    changes: dict[str, Any]
    notes: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: AdminAuditLog) -> 'AdminAuditLogResponse':
        return cls(
            id=entry.id,
            admin_id=entry.admin_id,
            action=entry.action,
            target_type=entry.target_type,
            target_id=entry.target_id,
            affected_user_ids=list(entry.affected_user_ids),
            changes=entry.changes,
            notes=entry.notes,
            created_at=entry.created_at,
        )
