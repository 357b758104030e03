"""Exceptions raised by the table engine.

Only construction problems raise out of the engine. Mutations that name an
unknown column or record are logged and dropped by ``OrderTable``.
"""


class UnknownColumnError(KeyError):
    """Raised by the column registry when a key is not registered."""

    pass


class DuplicateRecordIdError(ValueError):
    """Raised when the record set has duplicate or missing identifiers.

    Selection is keyed by record identifier, so every row must carry a
    unique, non-null value in the index column.
    """

    pass
