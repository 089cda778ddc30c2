def _no_quote(name):
    return name


class StatementBuilder:
    """
    Incrementally assembles a parameterized SELECT statement.

    Nothing is validated here: fragments are concatenated as given and only
    checked against their bindings when the statement is executed.

    The first selected table is the root table. Named columns of any other
    table are aliased ``<table>_<column>`` so they can never shadow a column
    of the root table in the result rows.
    """

    def __init__(self, quote=None, quote_schema=None):
        self._quote = quote or _no_quote
        self._quote_schema = quote_schema or self._quote

        # (table, column) pairs, column is '*' for all columns
        self._targets = []
        # table -> schema, in selection order
        self._from_tables = {}

        self._predicates = []
        self._bindings = []
        self._order_by = None
        self._limit = None

    @property
    def bindings(self):
        return list(self._bindings)

    @property
    def root_table(self):
        return next(iter(self._from_tables), None)

    def select(self, table, columns="*", schema=None):
        self._from_tables.setdefault(table, schema)

        if columns is None:
            return self

        if isinstance(columns, str):
            columns = [columns]

        for column in columns:
            self._targets.append((table, column))

        return self

    def where(self, fragment, bindings=None):
        self._predicates.append(fragment)

        # Bindings are replaced, not accumulated
        if bindings is not None:
            self._bindings = list(bindings)

        return self

    def order_by(self, expression):
        self._order_by = expression
        return self

    def limit(self, n):
        if isinstance(n, bool) or not isinstance(n, int) or n < 0:
            raise ValueError(f"limit() expects a non-negative integer, got {n!r}")

        self._limit = n
        return self

    def _render_target(self, table, column):
        if column == "*":
            return f"{self._quote(table)}.*"

        target = f"{self._quote(table)}.{self._quote(column)}"
        if table != self.root_table:
            target += f" AS {self._quote(f'{table}_{column}')}"
        return target

    def _render_table(self, table, schema):
        if schema:
            return f"{self._quote_schema(schema)}.{self._quote(table)}"
        return self._quote(table)

    def _render_predicate(self):
        if len(self._predicates) == 1:
            return self._predicates[0]
        return " AND ".join(f"({fragment})" for fragment in self._predicates)

    def build(self):
        """
        Return the SQL string and the list of values bound to its ``?``
        placeholders, in order.
        """
        targets = ", ".join(
            self._render_target(table, column)
            for table, column in self._targets
        ) or "*"
        tables = ", ".join(
            self._render_table(table, schema)
            for table, schema in self._from_tables.items()
        )

        sql = f"SELECT {targets} FROM {tables}"

        if self._predicates:
            sql += f" WHERE {self._render_predicate()}"

        if self._order_by:
            sql += f" ORDER BY {self._order_by}"

        if self._limit is not None:
            sql += f" LIMIT {self._limit}"

        return sql, self.bindings
