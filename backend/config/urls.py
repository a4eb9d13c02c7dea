"""
URL configuration for the garment CRM back office.

Every API app mounts its routes under ``api/v1/``; the admin site stays at
``admin/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Garment CRM Admin Panel"
admin.site.site_title = "Garment CRM Admin Portal"
admin.site.index_title = "Orders, payments and customers"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.orders.urls')),
    path('api/v1/', include('backend.payments.urls')),
]
