# bhp_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from bhp_core.asam.api.views import ASAMAssessmentViewSet
from bhp_core.audit.api.views import AuditEventViewSet
from bhp_core.compliance.api.views import (
    CredentialViewSet,
    DocumentCategoryViewSet,
    DocumentViewSet,
    EmployeeDocumentTypeViewSet,
    EmployeeDocumentViewSet,
    EmployeeViewSet,
)
from bhp_core.facilities.api.views import FacilityApplicationViewSet, FacilityViewSet
from bhp_core.iam.api.approval import AdminUserViewSet
from bhp_core.iam.api.auth import LoginView, LogoutView, RefreshView
from bhp_core.iam.api.me import MeView
from bhp_core.iam.api.mfa import MFAGenerateView, MFAVerifyView
from bhp_core.iam.api.registration import AvailableBHPsView, RegisterView
from bhp_core.intakes.api.views import IntakeViewSet
from bhp_core.meetings.api.views import MeetingViewSet
from bhp_core.messaging.api.views import MessageViewSet
from bhp_core.notifications.api.views import (
    NotificationCountsView,
    NotificationFeedView,
    NotificationReadView,
    UrgentNotificationsView,
)

router = DefaultRouter()

# Accounts
router.register(r"admin/users", AdminUserViewSet, basename="admin-users")

# Facilities
router.register(r"facilities", FacilityViewSet, basename="facilities")
router.register(r"facility-applications", FacilityApplicationViewSet, basename="facility-applications")

# Workflow documents
router.register(r"intakes", IntakeViewSet, basename="intakes")
router.register(r"asam", ASAMAssessmentViewSet, basename="asam")

# Compliance
router.register(r"credentials", CredentialViewSet, basename="credentials")
router.register(r"document-categories", DocumentCategoryViewSet, basename="document-categories")
router.register(r"documents", DocumentViewSet, basename="documents")
router.register(r"employees", EmployeeViewSet, basename="employees")
router.register(r"employee-document-types", EmployeeDocumentTypeViewSet, basename="employee-document-types")
router.register(r"employee-documents", EmployeeDocumentViewSet, basename="employee-documents")

# Meetings
router.register(r"meetings", MeetingViewSet, basename="meetings")

# Messaging + audit
router.register(r"messages", MessageViewSet, basename="messages")
router.register(r"audit/events", AuditEventViewSet, basename="audit-events")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/mfa/generate/", MFAGenerateView.as_view(), name="mfa-generate"),
    path("auth/mfa/verify/", MFAVerifyView.as_view(), name="mfa-verify"),
    path("me/", MeView.as_view(), name="me"),

    # Public
    path("bhps/available/", AvailableBHPsView.as_view(), name="available-bhps"),

    # Notifications
    path("notifications/", NotificationFeedView.as_view(), name="notifications"),
    path("notifications/read/", NotificationReadView.as_view(), name="notifications-read"),
    path("notifications/urgent/", UrgentNotificationsView.as_view(), name="notifications-urgent"),
    path("notifications/counts/", NotificationCountsView.as_view(), name="notifications-counts"),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
