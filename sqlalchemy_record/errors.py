class RecordError(Exception):
    """
    Base class for every error raised by sqlalchemy_record itself.

    Errors raised by the database driver are SQLAlchemy exceptions and are
    never wrapped.
    """


class UnmappedRecordError(RecordError):
    pass


class SchemaNotFoundError(RecordError):
    def __init__(self, tablename, schema=None):
        self.tablename = tablename
        self.schema = schema
        where = f"{schema}.{tablename}" if schema else tablename
        super().__init__(f"No columns found in the catalog for table '{where}'")


class BindingCountError(RecordError, ValueError):
    def __init__(self, sql, expected, given):
        self.sql = sql
        self.expected = expected
        self.given = given
        super().__init__(
            f"Statement has {expected} placeholder(s) but {given} binding(s) were supplied: {sql}"
        )


class UnknownColumnError(RecordError, KeyError):
    def __init__(self, tablename, colname):
        self.tablename = tablename
        self.colname = colname
        super().__init__(f"Table '{tablename}' has no column '{colname}'")

    def __str__(self):
        return self.args[0]


class NotPersistedError(RecordError):
    pass
