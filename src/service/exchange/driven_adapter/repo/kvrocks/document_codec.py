"""
JSON documents for Kvrocks

Entities are stored as orjson documents inside a hash next to a plain ``status``
field and a ``rev`` counter the Lua scripts bump on every conditional write, so
the scripts can guard on status and revision without decoding JSON.
The ticket ``kind`` tag selects the terms payload on the way back.
"""

from datetime import datetime
from typing import Any, Optional

import attrs
import orjson
from uuid_utils import UUID

from src.service.exchange.domain.entity.admin_audit_log_entity import AdminAction, AdminAuditLog
from src.service.exchange.domain.entity.game_entity import Game
from src.service.exchange.domain.entity.match_entity import Match
from src.service.exchange.domain.entity.notification_entity import Notification
from src.service.exchange.domain.entity.ticket_request_entity import (
    BuyTerms,
    SellTerms,
    TicketRequest,
    TicketTerms,
    TradeTerms,
)
from src.service.exchange.domain.entity.user_entity import User, UserRole
from src.service.exchange.domain.enum.match_event_type import MatchEventType
from src.service.exchange.domain.enum.match_status import MatchStatus
from src.service.exchange.domain.enum.section_type import SectionType
from src.service.exchange.domain.enum.ticket_kind import TicketKind
from src.service.exchange.domain.enum.ticket_request_status import TicketRequestStatus
from src.service.exchange.domain.value_object.match_history_entry import MatchHistoryEntry
from src.service.exchange.domain.value_object.snapshot import CounterpartySnapshot, UserSnapshot


def _default(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    raise TypeError(f'Type is not JSON serializable: {type(value).__name__}')


def encode(entity: Any) -> str:
    return orjson.dumps(attrs.asdict(entity, recurse=True), default=_default).decode()


def _uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


def _dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _section(value: Optional[str]) -> Optional[SectionType]:
    return SectionType(value) if value else None


def _decode_terms(kind: TicketKind, raw: dict[str, Any]) -> TicketTerms:
    match kind:
        case TicketKind.SELL:
            return SellTerms(
                section_type=SectionType(raw['section_type']),
                min_price=raw.get('min_price'),
                donating_free=raw.get('donating_free', False),
                seat_numbers=tuple(raw.get('seat_numbers') or ()),
            )
        case TicketKind.BUY:
            return BuyTerms(
                section_type=_section(raw.get('section_type')),
                any_section=raw.get('any_section', False),
                max_price=raw.get('max_price'),
                requesting_free=raw.get('requesting_free', False),
            )
        case TicketKind.TRADE:
            return TradeTerms(
                section_type_offered=SectionType(raw['section_type_offered']),
                section_type_desired=_section(raw.get('section_type_desired')),
                any_section=raw.get('any_section', False),
            )


def decode_ticket_request(raw: str | bytes) -> TicketRequest:
    doc = orjson.loads(raw)
    kind = TicketKind(doc['kind'])
    counterparty = doc.get('counterparty_snapshot')
    return TicketRequest(
        id=UUID(doc['id']),
        owner_id=UUID(doc['owner_id']),
        kind=kind,
        terms=_decode_terms(kind, doc['terms']),
        num_tickets=doc['num_tickets'],
        user_snapshot=UserSnapshot(**doc['user_snapshot']),
        game_id=_uuid(doc.get('game_id')),
        status=TicketRequestStatus(doc['status']),
        tickets_together=doc.get('tickets_together', False),
        is_direct_match=doc.get('is_direct_match', False),
        counterparty_snapshot=(
            CounterpartySnapshot(
                user_id=UUID(counterparty['user_id']),
                first_name=counterparty['first_name'],
                last_name=counterparty['last_name'],
                username=counterparty['username'],
                email=counterparty['email'],
                discord_handle=counterparty.get('discord_handle'),
                captured_at=datetime.fromisoformat(counterparty['captured_at']),
            )
            if counterparty
            else None
        ),
        notes=doc.get('notes'),
        created_at=datetime.fromisoformat(doc['created_at']),
        updated_at=_dt(doc.get('updated_at')),
    )


def decode_match(raw: str | bytes) -> Match:
    doc = orjson.loads(raw)
    return Match(
        id=UUID(doc['id']),
        initiator_ticket_id=UUID(doc['initiator_ticket_id']),
        matched_ticket_id=UUID(doc['matched_ticket_id']),
        status=MatchStatus(doc['status']),
        history=tuple(
            MatchHistoryEntry(
                status=MatchStatus(entry['status']),
                changed_by=_uuid(entry.get('changed_by')),
                timestamp=datetime.fromisoformat(entry['timestamp']),
                notes=entry.get('notes'),
            )
            for entry in doc.get('history', ())
        ),
        expires_at=_dt(doc.get('expires_at')),
        created_at=datetime.fromisoformat(doc['created_at']),
        updated_at=_dt(doc.get('updated_at')),
    )


def decode_game(raw: str | bytes) -> Game:
    doc = orjson.loads(raw)
    return Game(
        id=UUID(doc['id']),
        opponent=doc['opponent'],
        date=datetime.fromisoformat(doc['date']),
        is_deleted=doc.get('is_deleted', False),
        location=doc.get('location'),
    )


def decode_user(raw: str | bytes) -> User:
    doc = orjson.loads(raw)
    return User(
        id=UUID(doc['id']),
        username=doc['username'],
        first_name=doc.get('first_name', ''),
        last_name=doc.get('last_name', ''),
        email=doc.get('email', ''),
        discord_handle=doc.get('discord_handle'),
        role=UserRole(doc.get('role', UserRole.MEMBER)),
        is_active=doc.get('is_active', True),
        created_at=_dt(doc.get('created_at')),
    )


def decode_notification(raw: str | bytes) -> Notification:
    doc = orjson.loads(raw)
    return Notification(
        id=UUID(doc['id']),
        user_id=UUID(doc['user_id']),
        type=MatchEventType(doc['type']),
        title=doc['title'],
        message=doc['message'],
        match_id=_uuid(doc.get('match_id')),
        is_read=doc.get('is_read', False),
        created_at=datetime.fromisoformat(doc['created_at']),
    )


def decode_audit_log(raw: str | bytes) -> AdminAuditLog:
    doc = orjson.loads(raw)
    return AdminAuditLog(
        id=UUID(doc['id']),
        admin_id=UUID(doc['admin_id']),
        action=AdminAction(doc['action']),
        target_type=doc['target_type'],
        target_id=UUID(doc['target_id']),
        affected_user_ids=tuple(UUID(user_id) for user_id in doc['affected_user_ids']),
        changes=doc['changes'],
        notes=doc.get('notes'),
        created_at=datetime.fromisoformat(doc['created_at']),
    )
