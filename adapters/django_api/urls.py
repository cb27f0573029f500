"""
ARL Django adapter URL routing.
"""

from django.urls import path

from adapters.django_api import views


urlpatterns = [
    path("registry/publishers/register", views.publisher_register_view),
    path("registry/publishers/deregister", views.publisher_deregister_view),
    path("registry/publishers/<str:identity>", views.publisher_detail_view),
    path("registry/domains/<str:domain>", views.domain_detail_view),
    path("registry/sellers", views.seller_lookup_view),
    path("registry/sellers/add", views.seller_add_view),
    path("registry/sellers/remove", views.seller_remove_view),
]
