from django.urls import NoReverseMatch
from django.urls import reverse
from rest_framework import serializers

from collab_hub.users.models import User


class UserSerializer(serializers.ModelSerializer[User]):
    full_name = serializers.CharField(source="name", read_only=True)
    id = serializers.IntegerField(read_only=True)

    # Presence fields are owned by the realtime layer
    status = serializers.CharField(read_only=True)
    last_active = serializers.DateTimeField(read_only=True)

    username = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "first_name",
            "last_name",
            "full_name",
            "email",
            "avatar",
            "bio",
            "university",
            "skill_level",
            "status",
            "last_active",
            "url",
        ]

    url = serializers.SerializerMethodField()

    def get_url(self, obj: User) -> str:
        request = self.context.get("request")
        namespace = getattr(
            getattr(request, "resolver_match", None),
            "namespace",
            None,
        )
        candidates = [f"{namespace}:user-detail"] if namespace else []
        candidates += ["api_v1:user-detail", "api:user-detail"]
        for candidate in candidates:
            try:
                path = reverse(candidate, kwargs={"username": obj.username})
            except NoReverseMatch:
                continue
            return request.build_absolute_uri(path) if request else path
        return ""


class UserSummarySerializer(serializers.ModelSerializer[User]):
    """Compact sender/participant shape embedded in messages and notifications."""

    full_name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "username", "full_name", "avatar", "status", "last_active"]
        read_only_fields = fields
