# flowmigrate/errors.py


class FlowMigrateError(Exception):
    """Base class for errors raised by the conversion engine."""


class ConversionError(FlowMigrateError):
    """Raised once, at the convert() boundary, for any unexpected internal failure."""


class InternalConsistencyError(FlowMigrateError):
    """
    Node counts do not add up (converted + unsupported + ignored != total).
    Means the registry and the counting logic have diverged; never recoverable.
    """
