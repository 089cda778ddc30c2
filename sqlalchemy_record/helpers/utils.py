from datetime import date, datetime, time
from decimal import Decimal
from itertools import count
import re

SCALAR_TYPES = (type(None), bool, int, float, str, bytes, Decimal, date, time, datetime)

# Quoted literals are matched first so that a '?' or ':' inside them is left alone
_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\?|:(?=\w)")


def is_scalar(value):
    return isinstance(value, SCALAR_TYPES)


def is_empty_key(value):
    return value is None or value == ""


def count_placeholders(sql):
    """
    Count the positional ``?`` placeholders of a SQL string, ignoring the
    ones that appear inside quoted literals or identifiers.
    """
    return sum(1 for match in _TOKEN_RE.finditer(sql) if match.group(0) == "?")


def to_named_placeholders(sql, prefix="p"):
    """
    Rewrite positional ``?`` placeholders into ``:p0, :p1, ...`` so the
    statement can be handed to ``sqlalchemy.text()`` whatever the driver's
    paramstyle is. Colons already present in the SQL are escaped so they are
    not taken for bind parameters.
    """
    counter = count()

    def _replace(match):
        token = match.group(0)
        if token == ":":
            return "\\:"
        if token != "?":
            return token
        return f":{prefix}{next(counter)}"

    return _TOKEN_RE.sub(_replace, sql)
