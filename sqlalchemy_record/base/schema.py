from collections import defaultdict
from typing import NamedTuple, Optional, Tuple
import threading

from sqlalchemy import inspect
from sqlalchemy.exc import NoSuchTableError

from ..errors import SchemaNotFoundError
from ..logger import logger


class TableDescriptor(NamedTuple):
    table_name: str
    primary_key: str
    columns: Tuple[str, ...]


class TableConfig(NamedTuple):
    table_name: str
    primary_key: str = "id"
    schema: Optional[str] = None
    relations: Optional[dict] = None


class SchemaCache:
    """
    Per record type memoization of table metadata.

    Table name and primary key come from the registered ``TableConfig``, the
    column list is read from the database catalog on first access and kept
    until ``clear()`` is called.
    """

    def __init__(self, session):
        self.session = session
        self._descriptors = {}

        self._lock = threading.Lock()
        self._type_locks = defaultdict(threading.Lock)

    def __contains__(self, record_type):
        return record_type in self._descriptors

    def resolve(self, record_type) -> TableDescriptor:
        descriptor = self._descriptors.get(record_type)
        if descriptor is not None:
            return descriptor

        with self._lock:
            type_lock = self._type_locks[record_type]

        with type_lock:
            # Another thread may have populated it while we were waiting
            descriptor = self._descriptors.get(record_type)
            if descriptor is None:
                config = self.session.config_for(record_type)
                descriptor = TableDescriptor(
                    table_name=config.table_name,
                    primary_key=config.primary_key,
                    columns=self._fetch_columns(config.table_name, config.schema),
                )
                self._descriptors[record_type] = descriptor

        return descriptor

    def clear(self, record_type=None):
        if record_type is None:
            self._descriptors.clear()
        else:
            self._descriptors.pop(record_type, None)

    def _fetch_columns(self, tablename, schema=None):
        logger.debug(f"Reading columns of table '{tablename}' from the catalog")

        try:
            columns = inspect(self.session.bind).get_columns(tablename, schema=schema)
        except NoSuchTableError:
            columns = []

        if not columns:
            raise SchemaNotFoundError(tablename, schema)

        names = tuple(col["name"] for col in columns)
        logger.debug(f"Table '{tablename}' has columns {list(names)}")
        return names
