from rest_framework import serializers
from .models import User, StaffRole


class UserSerializer(serializers.ModelSerializer):
    """Basic staff serializer for profile display."""
    
    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'display_name',
            'role',
            'created_at',
            'last_login',
        ]
        read_only_fields = fields


class UserMinimalSerializer(serializers.ModelSerializer):
    """Minimal staff info for nested serialization."""
    
    display_name = serializers.SerializerMethodField()
    
    class Meta:
        model = User
        fields = ['id', 'display_name', 'role']
        read_only_fields = fields
    
    def get_display_name(self, obj):
        return obj.get_display_name()


class UserLoginSerializer(serializers.Serializer):
    """Serializer for staff login."""
    
    email = serializers.EmailField(required=True)
    password = serializers.CharField(
        required=True,
        write_only=True,
        style={'input_type': 'password'}
    )
    station = serializers.ChoiceField(
        choices=StaffRole.choices,
        required=False,
        help_text='Station to sign in at; defaults to the staff role'
    )
