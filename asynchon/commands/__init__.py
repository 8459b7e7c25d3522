from asynchon.commands.command import HonCommand
from asynchon.commands.loader import CommandLoader

__all__ = ["HonCommand", "CommandLoader"]
