"""Exceptions raised by the taxi fare pipeline."""

from __future__ import annotations


class TaxiFareError(Exception):
    """Base class for every error raised by this package."""


class FileAccessError(TaxiFareError):
    """A dataset or model file is missing or cannot be read."""


class ParseError(TaxiFareError):
    """A CSV row has the wrong shape or an unparsable numeric field."""


class SerializationError(TaxiFareError):
    """A model file is corrupt or was written by an incompatible version."""
