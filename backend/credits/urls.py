from django.urls import path
from .views import credits_me, credits_deduct, credits_add, transactions_me

urlpatterns = [
    path('user-credits/me/', credits_me, name='user-credits-me'),
    path('user-credits/deduct/', credits_deduct, name='user-credits-deduct'),
    path('user-credits/add/', credits_add, name='user-credits-add'),
    path('credit-transactions/me/', transactions_me, name='credit-transactions-me'),
]
