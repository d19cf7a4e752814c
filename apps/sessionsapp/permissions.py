from rest_framework import permissions

from .services.session_service import SessionService


def get_qr_id(request):
    return request.data.get("qr_id") or request.query_params.get("qr_id")


def customer_session_required(session_type):
    """
    Build a permission class that admits requests carrying a valid session.

    The verified session is attached to ``request.customer_session``.
    Verification failures raise the session errors directly so the client
    sees why access was refused.
    """

    class HasCustomerSession(permissions.BasePermission):
        def has_permission(self, request, view):
            session = SessionService.verify_session(get_qr_id(request), session_type)
            request.customer_session = session
            return True

    HasCustomerSession.__name__ = f"Has{session_type.capitalize()}Session"
    return HasCustomerSession
