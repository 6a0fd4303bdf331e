from django.contrib import admin

from collab_hub.follows import models


@admin.register(models.Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ["id", "follower", "following", "created_at"]
    search_fields = ["follower__username", "following__username"]
    raw_id_fields = ["follower", "following"]
