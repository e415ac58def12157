# apps/common/api.py
"""
API endpoints for common functionality.
"""

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .enums import get_all_enums


@swagger_auto_schema(
    method='get',
    tags=["Enums"],
    operation_description="""
    Get all application constants/enums.

    This endpoint returns read-only constants used across the platform for:
    - Sign-in providers
    - Like kinds
    - Video privacy and processing status
    - Username/password rules
    - Pagination limits

    **No authentication required.**
    """,
    responses={
        200: openapi.Response(
            description="All enums and constants",
            examples={
                "application/json": {
                    "auth_providers": [
                        {"value": "local", "label": "Email & Password"},
                        {"value": "google", "label": "Google"}
                    ],
                    "like_kinds": [
                        {"value": "like", "label": "Like"},
                        {"value": "dislike", "label": "Dislike"}
                    ],
                    "username": {"min_length": 3, "max_length": 30, "pattern": "^[a-z0-9_]+$"},
                    "password": {"min_length": 6},
                    "pagination": {"default_limit": 20, "max_limit": 100}
                }
            }
        )
    }
)
@api_view(['GET'])
@permission_classes([AllowAny])
def enums_api(request):
    """
    Get all application constants/enums.

    No authentication required.
    No database writes.
    """
    return Response(get_all_enums())
