from django.urls import path
from .views import audit_log_list, audit_log_detail

urlpatterns = [
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
