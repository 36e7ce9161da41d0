from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from replyflow.logging_config import get_logger
from replyflow.models import Contact
from replyflow.services.clock import utcnow

logger = get_logger("contact_service")


def get_active_contact(db: Session, company_id: UUID, phone_number: str) -> Optional[Contact]:
    return (
        db.query(Contact)
        .filter(
            Contact.company_id == company_id,
            Contact.phone_number == phone_number,
            Contact.is_deleted.is_(False),
        )
        .first()
    )


def resolve_contact(
    db: Session,
    company_id: UUID,
    phone_number: str,
    display_name: Optional[str] = None,
) -> Contact:
    """Find the non-deleted contact for a phone number or create it.

    An existing contact gets its WhatsApp name refreshed when one is
    supplied (last write wins). Soft-deleted contacts are never revived;
    a new row is created instead.
    """
    contact = get_active_contact(db, company_id, phone_number)

    if contact:
        if display_name:
            contact.whatsapp_name = display_name
            contact.updated_at = utcnow()
            db.flush()
        return contact

    contact = Contact(
        company_id=company_id,
        phone_number=phone_number,
        whatsapp_name=display_name,
        first_name=display_name,
    )
    db.add(contact)
    db.flush()
    logger.info(
        "Contact created",
        extra={"context": {"company_id": str(company_id), "contact_id": str(contact.id)}},
    )
    return contact
