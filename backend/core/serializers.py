from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name', 'phone', 'role',
                  'is_active', 'is_staff', 'is_superuser', 'created_at', 'updated_at']
        read_only_fields = ['is_staff', 'is_superuser', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)

    class Meta:
        model = User
        fields = ['username', 'email', 'password', 'password_confirm', 'first_name', 'last_name', 'phone']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        role = self.context.get('role', User.ROLE_SHOP_OWNER)
        user = User(**validated_data, role=role, is_active=True)
        user.set_password(password)
        user.save()
        return user


class AdminUserCreateSerializer(UserCreateSerializer):
    """Platform admins may pick the role of the user they create"""
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, default=User.ROLE_SHOP_OWNER)

    class Meta(UserCreateSerializer.Meta):
        fields = UserCreateSerializer.Meta.fields + ['role']

    def create(self, validated_data):
        self.context['role'] = validated_data.pop('role', User.ROLE_SHOP_OWNER)
        return super().create(validated_data)


class AuditLogSerializer(serializers.ModelSerializer):
    user = UserSerializer(read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'shop', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
