"""Import all models so Base.metadata knows every table."""
from chat_hub.infrastructure.db.models.channel import (
    ChannelAdminModel,
    ChannelMemberModel,
    ChannelModel,
)
from chat_hub.infrastructure.db.models.device import DeviceModel
from chat_hub.infrastructure.db.models.message import ChannelMessageModel, PeerMessageModel
from chat_hub.infrastructure.db.models.notification import NotificationHistoryModel

__all__ = [
    "ChannelAdminModel",
    "ChannelMemberModel",
    "ChannelMessageModel",
    "ChannelModel",
    "DeviceModel",
    "NotificationHistoryModel",
    "PeerMessageModel",
]
