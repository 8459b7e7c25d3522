from asynchon.models.favourite import CommandSnapshot, Favourite, HistoryEntry
from asynchon.models.result import SendResult

__all__ = ["CommandSnapshot", "Favourite", "HistoryEntry", "SendResult"]
