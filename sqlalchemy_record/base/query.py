from .statement import StatementBuilder


class RecordQuery:
    """
    Fluent, mutable SELECT over the table of a record type.

    Refinements return the query itself. Executing does not reset the
    accumulated state: calling ``all()`` twice runs the same statement twice.
    """

    def __init__(self, session, record_type):
        self.session = session
        self.record_type = record_type

        config = session.config_for(record_type)
        self._builder = StatementBuilder(quote=session.quote, quote_schema=session.quote_schema)
        self._builder.select(config.table_name, "*", schema=config.schema)

    @property
    def tablename(self):
        return self.session.config_for(self.record_type).table_name

    @property
    def sql(self):
        return self._builder.build()[0]

    @property
    def bindings(self):
        return self._builder.bindings

    def select(self, table, columns="*", schema=None):
        self._builder.select(table, columns, schema=schema)
        return self

    def where(self, fragment, bindings=None):
        self._builder.where(fragment, bindings)
        return self

    def order_by(self, expression):
        self._builder.order_by(expression)
        return self

    def limit(self, n):
        self._builder.limit(n)
        return self

    def all(self):
        sql, bindings = self._builder.build()
        result = self.session.execute(sql, bindings)

        return [
            self.record_type._from_row(row)
            for row in result.rows
        ]

    def first(self):
        items = self.limit(1).all()
        if not items:
            return None
        return items[0]

    def __iter__(self):
        return iter(self.all())

    def __repr__(self):
        return f"RecordQuery({self.record_type.__name__}: {self.sql})"
