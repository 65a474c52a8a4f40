from rest_framework import serializers
from .models import CreditTransaction


class CreditTransactionSerializer(serializers.ModelSerializer):
    balanceAfter = serializers.IntegerField(source='balance_after', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = CreditTransaction
        fields = ['id', 'type', 'amount', 'balanceAfter', 'metadata', 'createdAt']
