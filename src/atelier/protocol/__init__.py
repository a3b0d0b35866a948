"""Messages exchanged between the coordinator and its workers."""

from atelier.protocol.messages import (
    Announce,
    Assign,
    Confirm,
    HelpRequest,
    Message,
    MessageKind,
)

__all__ = [
    "Announce",
    "Assign",
    "Confirm",
    "HelpRequest",
    "Message",
    "MessageKind",
]
