"""
Exception taxonomy for the observation record engine.

Every failure the engine reports is fatal for the export call that raised
it. Callers can tell the kinds apart by class; all of them derive from
ObservadorError.
"""
from __future__ import annotations


class ObservadorError(Exception):
    """Base class for all engine errors."""


class AssetLoadError(ObservadorError):
    """A logo could not be fetched or decoded as an image."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load asset {url!r}: {reason}")


class ConfigInvariantError(ObservadorError):
    """Layout constants violate a structural invariant (column-width sum)."""


class LayoutOverflowError(ObservadorError):
    """Content does not fit the configured geometry of a backend."""


class PackagingError(ObservadorError):
    """The backend failed to serialize the final document bytes."""
