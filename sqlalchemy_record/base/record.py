from ..errors import UnmappedRecordError, UnknownColumnError
from ..helpers.utils import is_empty_key, is_scalar


class Record:
    """
    An in-memory row of the table its class is registered against.

    Values live in an ordered ``column -> scalar`` map; attribute access is a
    view over that map and only accepts columns reported by the catalog. The
    class is bound to a ``RecordSession`` by ``RecordSession.register()``.

    Example::

        session = RecordSession(engine)

        @session.mapped("posts")
        class Post(Record):
            user = BelongsTo("User", local_key="user_id")

        post = Post.create(title="hello", user_id=1)
        post.user().first()
    """

    __session__ = None

    def __init__(self, attributes=None, **kwargs):
        object.__setattr__(self, "_attributes", {})
        self.fill(attributes, **kwargs)

    @classmethod
    def _get_session(cls):
        session = cls.__session__
        if session is None or not session.is_registered(cls):
            raise UnmappedRecordError(f"{cls.__name__} is not registered with a RecordSession")
        return session

    @classmethod
    def _from_row(cls, row):
        obj = cls.__new__(cls)
        object.__setattr__(obj, "_attributes", dict(row))
        return obj

    @classmethod
    def _columns(cls):
        """
        Catalog columns of the table, or ``None`` when the class is not
        registered yet.
        """
        session = cls.__session__
        if session is None or not session.is_registered(cls):
            return None
        return session.schema.resolve(cls).columns

    @classmethod
    def _tablename(cls):
        return cls._get_session().config_for(cls).table_name

    @classmethod
    def _primary_key_name(cls):
        return cls._get_session().config_for(cls).primary_key

    def _set_attribute(self, name, value):
        columns = self._columns()
        if columns is not None and name not in columns:
            raise UnknownColumnError(self._tablename(), name)

        if not is_scalar(value):
            raise TypeError(
                f"Column '{name}' only accepts scalar values, got {type(value).__name__}"
            )

        self._attributes[name] = value

    def __getattr__(self, name):
        # Only reached when normal lookup failed
        if name.startswith("_"):
            raise AttributeError(name)

        attributes = self.__dict__.get("_attributes", {})
        if name in attributes:
            return attributes[name]

        columns = self._columns()
        if columns is not None and name in columns:
            return None

        raise AttributeError(f"'{type(self).__name__}' object has no attribute '{name}'")

    def __setattr__(self, name, value):
        if name.startswith("_") or hasattr(type(self), name):
            object.__setattr__(self, name, value)
            return

        self._set_attribute(name, value)

    def __getitem__(self, name):
        if name in self._attributes:
            return self._attributes[name]

        columns = self._columns()
        if columns is None:
            raise KeyError(name)
        if name not in columns:
            raise UnknownColumnError(self._tablename(), name)
        return None

    def __setitem__(self, name, value):
        self._set_attribute(name, value)

    def __repr__(self):
        values = " ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{type(self).__name__}({values})"

    def fill(self, attributes=None, **kwargs):
        values = dict(attributes or {})
        values.update(kwargs)

        for name, value in values.items():
            self._set_attribute(name, value)

        return self

    def to_dict(self):
        """
        Return the attribute map, in catalog column order when known.
        """
        columns = self._columns()
        if columns is None:
            return dict(self._attributes)

        return {
            col: self._attributes[col]
            for col in columns
            if col in self._attributes
        }

    @property
    def is_new(self):
        return is_empty_key(self._attributes.get(self._primary_key_name()))

    def save(self):
        return self._get_session().save(self)

    def update(self, attributes=None, **kwargs):
        self.fill(attributes, **kwargs)
        return self.save()

    def delete(self):
        return self._get_session().delete(self)

    @classmethod
    def query(cls):
        return cls._get_session().query(cls)

    @classmethod
    def create(cls, attributes=None, **kwargs):
        return cls._get_session().create(cls, attributes, **kwargs)

    @classmethod
    def get(cls, key):
        return cls._get_session().get(cls, key)
