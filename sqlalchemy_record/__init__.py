from .base.session import RecordSession
from .base.record import Record
from .base.query import RecordQuery
from .base.relations import HasMany, BelongsTo, resolve_relation
from .errors import (
    RecordError,
    UnmappedRecordError,
    SchemaNotFoundError,
    BindingCountError,
    UnknownColumnError,
    NotPersistedError,
)

__all__ = [
    "RecordSession",
    "Record",
    "RecordQuery",
    "HasMany",
    "BelongsTo",
    "resolve_relation",
    "RecordError",
    "UnmappedRecordError",
    "SchemaNotFoundError",
    "BindingCountError",
    "UnknownColumnError",
    "NotPersistedError",
]

__version__ = '0.1.0'
