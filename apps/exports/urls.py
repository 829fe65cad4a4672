from django.urls import path
from . import views

app_name = 'exports'

urlpatterns = [
    path('records/', views.export_records, name='export-records'),
    path('share-link/', views.share_link, name='share-link'),
]
