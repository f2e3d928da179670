from django.urls import path, include
from rest_framework.routers import DefaultRouter
from clubs.views import ClubViewSet
from events.views import CalendarEventViewSet

from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

router = DefaultRouter()
router.register(r'clubs', ClubViewSet)
router.register(r'events', CalendarEventViewSet)

urlpatterns = [
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('', include('attendance.urls')),
    path('', include(router.urls)),
]
