from django.urls import path

from stockflow.views import ApproveRequestView, RejectRequestView

app_name = 'stockflow'

urlpatterns = [
    path('requests/<int:request_id>/approve/', ApproveRequestView.as_view(), name='request-approve'),
    path('requests/<int:request_id>/reject/', RejectRequestView.as_view(), name='request-reject'),
]
