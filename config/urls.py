# config/urls.py
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

from apps.accounts import api


def api_root(request):
    return JsonResponse({"status": "ok"})


schema_view = get_schema_view(
    openapi.Info(
        title="Video Platform API",
        default_version="v1",
        description=(
            "Video Platform Backend API: accounts, likes and subscriptions.\n\n"
            "## Authentication\n"
            "Most endpoints require JWT Bearer token authentication.\n\n"
            "### How to Authenticate:\n"
            "1. Call `POST /api/auth/login/` (or an OAuth callback) to get tokens\n"
            "2. Copy the `access` token from the response\n"
            "3. Click the **Authorize** button above\n"
            "4. Enter: `Bearer <your_access_token>` (include 'Bearer ' prefix!)\n\n"
            "---\n\n"
            "## Pagination\n"
            "List endpoints accept the following query parameters:\n\n"
            "| Parameter | Type | Default | Max |\n"
            "|-----------|------|---------|-----|\n"
            "| `page` | integer | 1 | - |\n"
            "| `limit` | integer | 20 | 100 |\n\n"
            "### Paginated Response Format:\n"
            "```json\n"
            "{\n"
            '  "videos": [...],\n'
            '  "pagination": {"page": 1, "limit": 20, "total": 45, "pages": 3}\n'
            "}\n"
            "```\n\n"
            "---\n\n"
            "## Errors\n"
            "Errors share one envelope: "
            '`{"error": true, "status_code": 409, "code": "conflict", "message": "..."}`'
        ),
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
    # Disable authentication for schema endpoint to prevent 401 errors
    authentication_classes=[],
)

urlpatterns = [
    path("", api_root),
    path("admin/", admin.site.urls),
    path("api/health/", api.health_check, name="health_check"),
    path("api/", include("apps.common.urls")),
    # -----------------------------
    # AUTH & SOCIAL LOGIN
    # -----------------------------
    path("api/auth/", include("apps.accounts.urls")),
    # -----------------------------
    # LIKES & SUBSCRIPTIONS
    # -----------------------------
    path("api/", include("apps.engagement.urls")),
    # -----------------------------
    # DOCS
    # -----------------------------
    path("swagger/", schema_view.with_ui("swagger", cache_timeout=0)),
]

handler404 = "apps.common.utils.custom_404"
handler500 = "apps.common.utils.custom_500"
