"""
Feather Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("execute-logic-scripts", views.execute_logic_scripts_view),
    path("pricing/products", views.price_products_view),
    path("pricing/cart", views.price_cart_view),
    path("logic-scripts", views.logic_scripts_view),
    path("logic-scripts/update", views.logic_scripts_update_view),
    path("logic-scripts/delete", views.logic_scripts_delete_view),
    path("logic-scripts/reorder", views.logic_scripts_reorder_view),
]
