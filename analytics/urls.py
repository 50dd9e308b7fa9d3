from django.urls import path
from .views import ConsentAnalyticsView, ActivityAnalyticsView, record_activity

urlpatterns = [
	path("activity/", record_activity, name="record-activity"),  # POST /api/analytics/activity/
	path("consents/", ConsentAnalyticsView.as_view(), name="consent-analytics"),
	path("activity/summary/", ActivityAnalyticsView.as_view(), name="activity-analytics"),
]
