import logging
import math
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.contrib.auth import get_user_model
from backend.core.permissions import is_platform_admin
from backend.core.utils import create_audit_log, parse_positive_int
from .models import CreditTransaction
from .serializers import CreditTransactionSerializer
from .services import (
    CreditError, InsufficientCredits, add_credits, deduct_credits, get_or_create_credit
)

User = get_user_model()
logger = logging.getLogger('backend.credits')

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEDUCTION_TYPES = ('generation', 'photo_generation', 'video_generation')


def _parse_amount(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def credits_me(request):
    """Current user's credit balance"""
    credit = get_or_create_credit(request.user)
    return Response({
        'balance': credit.balance,
        'totalPurchased': credit.total_purchased,
        'totalUsed': credit.total_used,
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def credits_deduct(request):
    """Deduct credits from the current user"""
    amount = _parse_amount(request.data.get('amount'))
    if not amount or amount <= 0:
        return Response({'error': 'Invalid amount'}, status=status.HTTP_400_BAD_REQUEST)

    transaction_type = request.data.get('type') or 'generation'
    if transaction_type not in DEDUCTION_TYPES:
        return Response({'error': 'Invalid transaction type'}, status=status.HTTP_400_BAD_REQUEST)

    metadata = request.data.get('metadata')
    try:
        credit = deduct_credits(
            request.user,
            amount,
            type=transaction_type,
            metadata=metadata if isinstance(metadata, dict) else {},
        )
    except InsufficientCredits as e:
        return Response(
            {'error': 'Insufficient credits', 'details': {'required': e.required, 'available': e.available}},
            status=status.HTTP_400_BAD_REQUEST
        )
    except CreditError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='credit_deduct',
        model_name='UserCredit',
        object_id=str(credit.id),
        object_name=request.user.username,
        changes={'amount': amount, 'balance': credit.balance},
    )
    return Response({'success': True, 'balance': credit.balance, 'deducted': amount})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def credits_add(request):
    """Platform admins grant credits to a user"""
    if not is_platform_admin(request.user):
        logger.warning(f"User {request.user.id} tried to add credits without admin rights")
        return Response({'error': 'Only admins can add credits'}, status=status.HTTP_403_FORBIDDEN)

    user_id = request.data.get('userId')
    amount = _parse_amount(request.data.get('amount'))
    if not user_id or not amount or amount <= 0:
        return Response({'error': 'userId and positive amount required'}, status=status.HTTP_400_BAD_REQUEST)

    target = User.objects.filter(pk=parse_positive_int(user_id, 0)).first()
    if target is None:
        return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

    credit = add_credits(target, amount, reason=request.data.get('reason'))
    create_audit_log(
        request=request,
        action='credit_add',
        model_name='UserCredit',
        object_id=str(credit.id),
        object_name=target.username,
        changes={'amount': amount, 'balance': credit.balance, 'reason': request.data.get('reason')},
    )
    return Response({
        'success': True,
        'userId': target.id,
        'newBalance': credit.balance,
        'added': amount,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transactions_me(request):
    """Current user's credit transactions, newest first"""
    page = parse_positive_int(request.query_params.get('page'), 1)
    page_size = parse_positive_int(request.query_params.get('pageSize'), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

    queryset = CreditTransaction.objects.filter(user=request.user).order_by('-created_at', '-id')
    total = queryset.count()
    offset = (page - 1) * page_size
    transactions = queryset[offset:offset + page_size]

    return Response({
        'data': CreditTransactionSerializer(transactions, many=True).data,
        'meta': {
            'pagination': {
                'page': page,
                'pageSize': page_size,
                'total': total,
                'pageCount': math.ceil(total / page_size),
            },
        },
    })
