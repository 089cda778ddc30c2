from contextlib import contextmanager
from typing import Any, List, NamedTuple

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine

from .query import RecordQuery
from .relations import Relation
from .schema import SchemaCache, TableConfig
from ..errors import BindingCountError, NotPersistedError, UnmappedRecordError
from ..helpers.utils import count_placeholders, to_named_placeholders
from ..logger import logger


class ExecutionResult(NamedTuple):
    rows: List[Any]
    rowcount: int
    lastrowid: Any = None


class RecordSession:
    """
    Binds record types to a SQLAlchemy ``Engine`` or ``Connection``.

    When bound to an ``Engine`` every statement runs in its own transaction.
    When bound to a ``Connection`` statements run on it as-is and committing
    is left to the caller.

    Generated keys are read from the driver's ``lastrowid``. Drivers that do
    not report it (psycopg2 returns the row OID, usually 0) leave inserted
    entities without a usable key; a warning is logged when that happens.
    """

    def __init__(self, bind):
        self.bind = bind
        self.schema = SchemaCache(self)
        self._configs = {}

    @classmethod
    def from_url(cls, url, **engine_kwargs):
        return cls(create_engine(url, **engine_kwargs))

    def quote(self, name):
        return self.bind.dialect.identifier_preparer.quote(name)

    def quote_schema(self, schema):
        return self.bind.dialect.identifier_preparer.quote_schema(schema)

    def table_ref(self, record_type):
        """
        Schema qualified, quoted name of the table a record type is bound to.
        """
        config = self.config_for(record_type)
        if config.schema:
            return f"{self.quote_schema(config.schema)}.{self.quote(config.table_name)}"
        return self.quote(config.table_name)

    # Registration

    def register(self, record_type, table, primary_key="id", schema=None, relations=None):
        found = {}
        for klass in reversed(record_type.__mro__):
            for name, value in vars(klass).items():
                if isinstance(value, Relation):
                    found[name] = value

        for name, relation in (relations or {}).items():
            setattr(record_type, name, relation)
            relation.__set_name__(record_type, name)
            found[name] = relation

        self._configs[record_type] = TableConfig(
            table_name=table,
            primary_key=primary_key,
            schema=schema,
            relations=found,
        )
        self.schema.clear(record_type)
        record_type.__session__ = self

        logger.debug(f"Registered {record_type.__name__} on table '{table}' (relations: {list(found)})")
        return record_type

    def mapped(self, table, **kwargs):
        """
        Class decorator form of ``register()``.
        """
        def decorator(record_type):
            return self.register(record_type, table, **kwargs)
        return decorator

    def is_registered(self, record_type):
        return record_type in self._configs

    def config_for(self, record_type) -> TableConfig:
        try:
            return self._configs[record_type]
        except KeyError:
            raise UnmappedRecordError(
                f"{getattr(record_type, '__name__', record_type)} is not registered with this session"
            ) from None

    def resolve_type(self, target):
        """
        Return the registered record type designated by a class or a class name.
        """
        if isinstance(target, type):
            self.config_for(target)
            return target

        for record_type in self._configs:
            if record_type.__name__ == target:
                return record_type

        raise UnmappedRecordError(f"No record type named '{target}' is registered with this session")

    # Execution

    @contextmanager
    def _connection(self):
        if isinstance(self.bind, Engine):
            with self.bind.begin() as conn:
                yield conn
        else:
            yield self.bind

    def execute(self, sql, bindings=()):
        """
        Run a statement written with positional ``?`` placeholders.
        """
        bindings = list(bindings)

        expected = count_placeholders(sql)
        if expected != len(bindings):
            raise BindingCountError(sql, expected, len(bindings))

        statement = text(to_named_placeholders(sql))
        params = {f"p{idx}": value for idx, value in enumerate(bindings)}

        logger.debug(f"Executing: {sql} {bindings}")

        with self._connection() as conn:
            result = conn.execute(statement, params)

            if result.returns_rows:
                return ExecutionResult(result.mappings().all(), result.rowcount)

            return ExecutionResult([], result.rowcount, result.lastrowid)

    def query(self, record_type):
        return RecordQuery(self, record_type)

    def get(self, record_type, key):
        """
        Return the entity with the given primary key, or ``None`` if not found.
        """
        config = self.config_for(record_type)
        predicate = f"{self.quote(config.table_name)}.{self.quote(config.primary_key)} = ?"
        return self.query(record_type).where(predicate, [key]).first()

    # Persistence

    def _column_values(self, entity, descriptor):
        # Catalog column order, which is also the binding order
        attributes = entity.to_dict()
        return [
            (col, attributes[col])
            for col in descriptor.columns
            if col in attributes and col != descriptor.primary_key
        ]

    def save(self, entity):
        if entity.is_new:
            return self.insert(entity)
        return self.update(entity)

    def insert(self, entity):
        descriptor = self.schema.resolve(type(entity))
        values = self._column_values(entity, descriptor)
        table = self.table_ref(type(entity))

        if values:
            columns = ", ".join(self.quote(col) for col, _ in values)
            placeholders = ", ".join("?" for _ in values)
            sql = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
        else:
            sql = f"INSERT INTO {table} DEFAULT VALUES"

        result = self.execute(sql, [value for _, value in values])

        if not result.lastrowid and not self.bind.dialect.postfetch_lastrowid:
            logger.warning(
                f"The {self.bind.dialect.name} driver reported no usable id for the row inserted "
                f"into '{descriptor.table_name}' (lastrowid={result.lastrowid!r})"
            )

        entity[descriptor.primary_key] = result.lastrowid
        logger.debug(f"Inserted into '{descriptor.table_name}' with {descriptor.primary_key}={result.lastrowid}")

        return entity

    def update(self, entity):
        if entity.is_new:
            raise NotPersistedError(f"Cannot update {entity!r}: it has no primary key value")

        descriptor = self.schema.resolve(type(entity))
        values = self._column_values(entity, descriptor)
        key = entity[descriptor.primary_key]

        if not values:
            logger.debug(f"Nothing to update in '{descriptor.table_name}' where {descriptor.primary_key}={key!r}")
            return entity

        assignments = ", ".join(f"{self.quote(col)} = ?" for col, _ in values)
        sql = (
            f"UPDATE {self.table_ref(type(entity))} SET {assignments} "
            f"WHERE {self.quote(descriptor.primary_key)} = ?"
        )
        self.execute(sql, [value for _, value in values] + [key])

        return entity

    def delete(self, entity):
        if entity.is_new:
            raise NotPersistedError(f"Cannot delete {entity!r}: it has no primary key value")

        descriptor = self.schema.resolve(type(entity))
        key = entity[descriptor.primary_key]

        sql = (
            f"DELETE FROM {self.table_ref(type(entity))} "
            f"WHERE {self.quote(descriptor.primary_key)} = ?"
        )
        result = self.execute(sql, [key])

        logger.debug(f"Deleted from '{descriptor.table_name}' where {descriptor.primary_key}={key!r}")
        entity[descriptor.primary_key] = None

        return result.rowcount

    def create(self, record_type, attributes=None, **kwargs):
        return self.save(record_type(attributes, **kwargs))
