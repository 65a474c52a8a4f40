from django.contrib import admin
from .models import UserCredit, CreditTransaction


@admin.register(UserCredit)
class UserCreditAdmin(admin.ModelAdmin):
    list_display = ['user', 'balance', 'total_purchased', 'total_used', 'updated_at']
    search_fields = ['user__username', 'user__email']
    ordering = ['-updated_at']


@admin.register(CreditTransaction)
class CreditTransactionAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'amount', 'balance_after', 'created_at']
    list_filter = ['type', 'created_at']
    search_fields = ['user__username']
    ordering = ['-created_at']
    readonly_fields = ['user', 'type', 'amount', 'balance_after', 'metadata', 'created_at']
