from django.urls import path
from . import views

app_name = 'milk'

urlpatterns = [
    # Records
    path('records/', views.record_list, name='record-list'),
    path('records/<uuid:record_id>/', views.record_detail, name='record-detail'),
    path('records/<uuid:record_id>/confirm/', views.confirm, name='record-confirm'),

    # Daily reconciliation
    path('add/', views.add_record, name='add-record'),
    path('today/', views.today_record, name='today'),
    path('bulk-create/', views.bulk_create, name='bulk-create'),

    # Statistics
    path('statistics/', views.range_statistics, name='statistics'),
    path('monthly-stats/<int:year>/<int:month>/', views.monthly_stats, name='monthly-stats'),
]
