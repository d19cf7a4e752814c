import logging
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.queueapp.constants import queue_setting
from core.exceptions import (
    AuthenticationException,
    DuplicateResourceException,
    InvalidDataException,
    PermissionDeniedException,
    ResourceNotFoundException,
)

from ..models import CustomerSession, SessionType

logger = logging.getLogger(__name__)


class SessionService:
    @staticmethod
    def issue_session(session_type=SessionType.FORM, lifetime=None, created_by=""):
        """Create a fresh session valid for ``lifetime`` (default from settings)"""
        if lifetime is None:
            lifetime = timedelta(hours=queue_setting("SESSION_LIFETIME_HOURS"))

        now = timezone.now()
        session = CustomerSession.objects.create(
            type=session_type,
            issued_at=now,
            expires_at=now + lifetime,
            created_by=created_by or "",
        )
        logger.info(f"Issued {session_type} session {session.id}")
        return session

    @staticmethod
    def verify_session(qr_id, session_type):
        """
        Check that ``qr_id`` names a live, unused session of ``session_type``.

        Args:
            qr_id: Session identifier carried by the customer's QR link
            session_type: Required SessionType

        Returns:
            CustomerSession: The verified session

        Raises:
            InvalidDataException: qr_id missing or malformed
            ResourceNotFoundException: no such session
            PermissionDeniedException: wrong type, or already used
            AuthenticationException: session expired
        """
        if not qr_id:
            raise InvalidDataException("qr_id is required")

        try:
            session = CustomerSession.objects.get(id=qr_id)
        except (CustomerSession.DoesNotExist, ValidationError, ValueError):
            raise ResourceNotFoundException("QR id not found")

        if session.type != session_type:
            raise PermissionDeniedException("No access allowed")

        if session.is_expired:
            raise AuthenticationException("Unauthorized access. Scan the QR code again.")

        if session.used:
            raise PermissionDeniedException(
                "Session has already been used. Please scan a new QR code."
            )

        return session

    @staticmethod
    def mark_joined(session_ref):
        """
        Switch a form session to a queue session.

        The conditional update makes the switch happen at most once, so a
        session can back only one join even under concurrent requests.
        """
        updated = CustomerSession.objects.filter(
            id=session_ref, type=SessionType.FORM, used=False
        ).update(type=SessionType.QUEUE, joined_at=timezone.now())

        if not updated:
            logger.warning(f"Session {session_ref} already used to join a queue")
            raise DuplicateResourceException("This session has already joined a queue.")

    @staticmethod
    def invalidate(session_ref, status="completed"):
        """Mark the session used once its queue entry reaches a terminal status"""
        if session_ref is None:
            return 0

        updated = CustomerSession.objects.filter(id=session_ref, used=False).update(
            used=True, used_at=timezone.now(), status=status
        )
        if updated:
            logger.info(f"Session {session_ref} invalidated ({status})")
        return updated

    @staticmethod
    def expire_stale_sessions():
        """Mark expired sessions that were never used; returns the number touched"""
        now = timezone.now()
        return CustomerSession.objects.filter(used=False, expires_at__lt=now).update(
            used=True, used_at=now, status="expired"
        )
