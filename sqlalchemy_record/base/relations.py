from functools import partial

from ..logger import logger

HAS_MANY = "has_many"
BELONGS_TO = "belongs_to"


def resolve_relation(session, kind, source, target_type, local_key, foreign_key):
    """
    Build the query returning the ``target_type`` rows linked to ``source``.

    The target table is joined to the source table on
    ``target.foreign_key = source.local_key`` and restricted to the local key
    value of this very ``source`` instance. Nothing is executed: the caller
    may refine the query before calling ``all()`` or ``first()``.
    """
    if kind not in (HAS_MANY, BELONGS_TO):
        raise ValueError(f"Unknown relation kind: {kind!r}")

    q = session.quote
    source_table = session.config_for(type(source)).table_name
    target_table = session.config_for(target_type).table_name

    local_ref = f"{q(source_table)}.{q(local_key)}"
    join = f"{q(target_table)}.{q(foreign_key)} = {local_ref}"

    value = source[local_key]
    logger.debug(f"Resolving {kind} {source_table}.{local_key}={value!r} -> {target_table}.{foreign_key}")

    query = session.query(target_type)

    if source_table == target_table:
        # Joining a table to itself would compare two columns of the same row
        return query.where(f"{q(target_table)}.{q(foreign_key)} = ?", [value])

    source_schema = session.config_for(type(source)).schema
    return (
        query
        .select(source_table, None, schema=source_schema)
        .where(f"{join} AND {local_ref} = ?", [value])
    )


class Relation:
    kind = None

    def __init__(self, target, local_key=None, foreign_key=None):
        self.target = target
        self.local_key = local_key
        self.foreign_key = foreign_key
        self.name = None

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return partial(self.resolve, instance)

    def __repr__(self):
        return f"{type(self).__name__}({self.name}: {self.target!r})"

    def _keys(self, session, source_type, target_type):
        raise NotImplementedError

    def resolve(self, source):
        session = type(source)._get_session()
        target_type = session.resolve_type(self.target)
        local_key, foreign_key = self._keys(session, type(source), target_type)

        return resolve_relation(session, self.kind, source, target_type, local_key, foreign_key)


class HasMany(Relation):
    """
    The source is the "one" side: ``user.posts()`` with
    ``posts = HasMany("Post", foreign_key="user_id")``.
    """
    kind = HAS_MANY

    def __init__(self, target, foreign_key, local_key=None):
        super().__init__(target, local_key=local_key, foreign_key=foreign_key)

    def _keys(self, session, source_type, target_type):
        local_key = self.local_key or session.config_for(source_type).primary_key
        return local_key, self.foreign_key


class BelongsTo(Relation):
    """
    The source is the "many" side: ``post.user()`` with
    ``user = BelongsTo("User", local_key="user_id")``.
    """
    kind = BELONGS_TO

    def __init__(self, target, local_key, foreign_key=None):
        super().__init__(target, local_key=local_key, foreign_key=foreign_key)

    def _keys(self, session, source_type, target_type):
        foreign_key = self.foreign_key or session.config_for(target_type).primary_key
        return self.local_key, foreign_key
