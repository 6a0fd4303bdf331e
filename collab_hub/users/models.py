from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import CharField
from django.db.models import EmailField
from django.urls import reverse
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class User(AbstractUser):
    """
    Default custom user model for collab_hub.

    ``status`` and ``last_active`` are written by the realtime layer when a
    live session opens or closes; they are advisory and never used to decide
    whether a live push is attempted (the presence registry is).
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Active")
        INACTIVE = "inactive", _("Inactive")
        BUSY = "busy", _("Busy")

    class SkillLevel(models.TextChoices):
        BEGINNER = "beginner", _("Beginner")
        INTERMEDIATE = "intermediate", _("Intermediate")
        ADVANCED = "advanced", _("Advanced")

    # First and last name do not cover name patterns around the globe
    name = CharField(_("Full Name"), blank=True, max_length=255)
    email = EmailField(_("email address"), unique=True)
    first_name = CharField(_("First Name"), max_length=150, blank=True)
    last_name = CharField(_("Last Name"), max_length=150, blank=True)

    avatar = models.URLField(_("Avatar"), max_length=500, blank=True)
    bio = models.TextField(_("Bio"), max_length=500, blank=True)
    university = CharField(_("University"), max_length=255, blank=True)
    skill_level = CharField(
        _("Skill level"),
        max_length=20,
        choices=SkillLevel.choices,
        default=SkillLevel.BEGINNER,
    )

    status = CharField(
        _("Presence status"),
        max_length=20,
        choices=Status.choices,
        default=Status.INACTIVE,
    )
    last_active = models.DateTimeField(default=timezone.now)

    # Audit timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def save(self, *args, **kwargs):
        # Keep the display name in sync when first/last name are provided
        full_name = f"{self.first_name} {self.last_name}".strip()
        if full_name:
            self.name = full_name
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.name or self.username

    def get_absolute_url(self) -> str:
        """Get URL for user's detail view.

        Returns:
            str: URL for user detail.

        """
        return reverse("api_v1:user-detail", kwargs={"username": self.username})
