from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class UserDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = (
            'id',
            'email',
            'username',
            'nickname',
            'role',
            'grade',
            'class_code',
            'enrollment_status',
            'managed_class_codes',
            'assigned_class_codes',
        )
        read_only_fields = fields
