
from django.contrib import admin
from django.urls import path, include



urlpatterns = [
    path("admin/", admin.site.urls),
    path('api/auth/', include('account.urls')),
    path('api/inventory/', include('catalog.urls')),
    path('api/suppliers/', include('suppliers.urls')),
    path('api/projects/', include('projects.urls')),
    path('api/transactions/', include('inventory.urls')),
    path('api/reports/', include('reports.urls')),
]
