from asynchon.api.client import HonAPI

__all__ = ["HonAPI"]
