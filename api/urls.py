"""API routes.

Versioned REST endpoints live under /api/v1/; the OpenAPI schema and its
interactive documentation are served alongside.
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)


from .views import (
    UserViewSet,
    ProfessorViewSet,
    DisciplineViewSet,
    InfrastructureViewSet,
    FeedbackViewSet,
    register,
    login,
    verify,
    logout,
)

router = DefaultRouter()
router.register(r"api/v1/users", UserViewSet, basename="users")
router.register(r"api/v1/professors", ProfessorViewSet, basename="professors")
router.register(r"api/v1/disciplines", DisciplineViewSet, basename="disciplines")
router.register(r"api/v1/infrastructure", InfrastructureViewSet, basename="infrastructure")
router.register(r"api/v1/feedback", FeedbackViewSet, basename="feedback")

urlpatterns = [
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    path("api/v1/auth/register", register, name="auth-register"),
    path("api/v1/auth/login", login, name="auth-login"),
    path("api/v1/auth/verify", verify, name="auth-verify"),
    path("api/v1/auth/logout", logout, name="auth-logout"),
    path("", include(router.urls)),
]
