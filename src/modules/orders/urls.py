"""Admin order URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.orders.views import AdminDashboardView, AdminOrdersView

urlpatterns = [
    path("orders", AdminOrdersView.as_view(), name="admin-orders"),
    path("dashboard", AdminDashboardView.as_view(), name="admin-dashboard"),
]
