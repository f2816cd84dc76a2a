from teamsnotify.client import TeamsClient
from teamsnotify.message import MessageCard, TeamsMessage

__all__ = [
    "MessageCard",
    "TeamsClient",
    "TeamsMessage",
]
