from django.urls import path
from .views import payment_list_create, payment_detail, order_payment_list, order_payment_summary

urlpatterns = [
    path('payments/', payment_list_create, name='payment-list-create'),
    path('payments/<uuid:pk>/', payment_detail, name='payment-detail'),
    path('payments/order/<uuid:order_id>/', order_payment_list, name='order-payment-list'),
    path('payments/order/<uuid:order_id>/summary/', order_payment_summary, name='order-payment-summary'),
]
