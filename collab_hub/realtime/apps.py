from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class RealtimeConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "collab_hub.realtime"
    verbose_name = _("Realtime")

    def ready(self):
        from collab_hub.notifications.dispatch import install_publisher  # noqa: PLC0415
        from collab_hub.realtime.events.notifications import HubPublisher  # noqa: PLC0415
        from collab_hub.realtime.socketio import hub  # noqa: PLC0415

        install_publisher(HubPublisher(hub))
