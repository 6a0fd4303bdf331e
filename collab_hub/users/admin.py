from django.contrib import admin
from django.contrib.auth import admin as auth_admin
from django.utils.translation import gettext_lazy as _

from collab_hub.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    fieldsets = (
        *auth_admin.UserAdmin.fieldsets,
        (
            _("Profile"),
            {"fields": ("name", "avatar", "bio", "university", "skill_level")},
        ),
        (_("Presence"), {"fields": ("status", "last_active")}),
    )
    list_display = ["username", "name", "email", "status", "last_active"]
    search_fields = ["name", "username", "email"]
    list_filter = ["status", "skill_level", "is_staff"]
