from datetime import datetime, timezone
from typing import Iterable, List, Set
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.models import ChannelKBAssignment, KnowledgeBaseEntry
from replyflow.services.clock import ensure_utc

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def select_visible_entries(
    entries: Iterable[KnowledgeBaseEntry],
    assigned_entry_ids: Set[UUID],
) -> List[KnowledgeBaseEntry]:
    """Entries visible to a channel.

    Explicit assignments restrict the set to the assigned entries; with no
    assignments every company entry is visible.
    """
    entries = list(entries)
    if assigned_entry_ids:
        entries = [entry for entry in entries if entry.id in assigned_entry_ids]
    return sorted(entries, key=lambda entry: (ensure_utc(entry.created_at) or EPOCH, str(entry.id)))


def get_assigned_entry_ids(db: Session, channel_id: int) -> Set[UUID]:
    rows = db.query(ChannelKBAssignment.entry_id).filter(ChannelKBAssignment.channel_id == channel_id).all()
    return {row.entry_id for row in rows}


def get_visible_entries(db: Session, company_id: UUID, channel_id: int) -> List[KnowledgeBaseEntry]:
    entries = db.query(KnowledgeBaseEntry).filter(KnowledgeBaseEntry.company_id == company_id).all()
    return select_visible_entries(entries, get_assigned_entry_ids(db, channel_id))
