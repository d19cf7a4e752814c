import logging

from celery import shared_task

from .services.session_service import SessionService

logger = logging.getLogger(__name__)


@shared_task
def expire_stale_sessions():
    """Close out sessions that expired before being used"""
    expired = SessionService.expire_stale_sessions()
    logger.info(f"Expired {expired} stale customer sessions")
    return expired
