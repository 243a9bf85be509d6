"""Base exception for the package.

Concrete errors live next to the code that raises them:
    NotASettingsFile      -> toonsettings.core.identity.codec
    DirectoryUnavailable  -> toonsettings.scanning.scanner
    TransportError family -> toonsettings.resolution.transport
    SourceUnreadable      -> toonsettings.copying.engine
"""


class ToonSettingsError(Exception):
    """Root of every exception raised by toonsettings."""

    pass
