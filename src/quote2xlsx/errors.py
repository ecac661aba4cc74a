from __future__ import annotations


class ExportError(Exception):
    """Export could not produce a document."""


class InvalidExportOptions(ExportError, ValueError):
    """Rejected before any layout work started."""


class LayoutError(ExportError):
    pass
