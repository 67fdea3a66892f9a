from django.urls import path
from . import views

urlpatterns = [
    path('telegram/webhook/', views.telegram_webhook, name='telegram_webhook'),
    path('telegram/setup-user/', views.telegram_setup_user, name='telegram_setup_user'),
]
