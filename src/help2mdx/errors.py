"""Fatal conditions raised while converting a help-center export."""

from __future__ import annotations


class ConversionError(RuntimeError):
    """Base class for errors that abort a conversion run."""


class ManifestStructureError(ConversionError):
    """The navigation index does not describe a usable section tree."""


class MissingSourceDocumentError(ConversionError):
    """A file required by the navigation index is absent from the export."""
