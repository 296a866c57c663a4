from django.urls import path

from .views import (
    TransactionDetailView,
    TransactionListCreateView,
    TransactionSummaryView,
    TransactionsByTypeView,
)


urlpatterns = [
    path("", TransactionListCreateView.as_view(), name="transaction-list"),
    path("summary/overview/", TransactionSummaryView.as_view(), name="transaction-summary"),
    path("type/<str:type>/", TransactionsByTypeView.as_view(), name="transactions-by-type"),
    path("<int:pk>/", TransactionDetailView.as_view(), name="transaction-detail"),
]
