from rest_framework import serializers

from collab_hub.users.models import User


class FollowUserSerializer(serializers.ModelSerializer[User]):
    full_name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "university", "skill_level", "avatar"]
        read_only_fields = fields
