# core/urls.py (Main URL file)

from django.contrib import admin
from django.urls import path, include
from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# --- Swagger Config ---
schema_view = get_schema_view(
   openapi.Info(
      title="Locates Dashboard API",
      default_version='v1',
      description="Excavator locate work orders: call tracking, timers and recycle bin",
   ),
   public=True,
   permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/locates/', include('locates.urls')),

    # --- API Documentation URLs ---
    path('api/docs/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('api/redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
