# src/models/notification.py

"""Notification payload handed to a notification sink."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Notification:
    """A user-facing alert."""

    title: str
    body: str
