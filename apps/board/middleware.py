# apps/board/middleware.py

import logging

from django.conf import settings
from django.http import JsonResponse

logger = logging.getLogger(__name__)


class UserIdentityMiddleware:
    """
    Resolves the caller identity of API requests

    The identity is opaque: whatever the gateway puts in the X-User-Id
    header becomes `request.owner_id`. API calls without it get a 401
    before reaching any view.
    """

    header = 'X-User-Id'

    def __init__(self, get_response):
        self.get_response = get_response
        self.prefix = getattr(settings, 'BOARDFLOW_API_PREFIX', '/api/')

    def __call__(self, request):
        owner_id = request.headers.get(self.header, '').strip()
        request.owner_id = owner_id or None

        if request.path.startswith(self.prefix) and not owner_id:
            logger.warning(f"❌ {request.method} {request.path} rejected - missing {self.header}")
            return JsonResponse(
                {'success': False, 'error': 'missing user id', 'code': 'unauthenticated'},
                status=401
            )

        return self.get_response(request)
