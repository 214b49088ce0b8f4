from django.urls import path
from .views import (
    ElementImageView,
    ElementInfoView,
    RedesignItemView,
    RedesignJobCancelView,
    RedesignJobView,
    RedesignPinView,
    RedesignView,
    ReplacementsView,
    UsageView,
)

urlpatterns = [
    path('redesigns/', RedesignView.as_view(), name='redesigns'),
    path('redesigns/jobs/<uuid:job_id>/', RedesignJobView.as_view(), name='redesign-job'),
    path('redesigns/jobs/<uuid:job_id>/cancel/', RedesignJobCancelView.as_view(), name='redesign-job-cancel'),
    path('redesigns/<uuid:redesign_id>/', RedesignItemView.as_view(), name='redesign-item'),
    path('redesigns/<uuid:redesign_id>/pin/', RedesignPinView.as_view(), name='redesign-pin'),
    path('usage/', UsageView.as_view(), name='usage'),
    path('elements/info/', ElementInfoView.as_view(), name='element-info'),
    path('elements/image/', ElementImageView.as_view(), name='element-image'),
    path('elements/replacements/', ReplacementsView.as_view(), name='element-replacements'),
]
