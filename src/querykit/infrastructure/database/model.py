"""
Active-record base class.

Entities are dataclasses deriving from ``Model``. Each declares its table, its
primary key column and the ``fillable`` whitelist of columns that inserts and
updates may write::

    @dataclass
    class Post(Model):
        table: ClassVar[str] = "posts"
        fillable: ClassVar[tuple[str, ...]] = ("title", "body")

        title: str
        body: str = ""
        id: int | None = None

The database is passed explicitly to every operation; a model never looks up a
connection on its own.
"""

import dataclasses
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from querykit.application.interfaces.exceptions import HydrationError

if TYPE_CHECKING:
    from querykit.infrastructure.database.database import Database
    from querykit.infrastructure.database.query_builder import QueryBuilder

logger = logging.getLogger(__name__)

M = TypeVar("M", bound="Model")


def _is_many(keys: Any) -> bool:
    return isinstance(keys, (list, tuple, set, frozenset))


class Model:
    """Base class mapping a dataclass onto a table."""

    table: ClassVar[str] = ""
    primary_key: ClassVar[str] = "id"
    fillable: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def query(cls: type[M], db: "Database") -> "QueryBuilder":
        """New builder on this model's table that hydrates rows into ``cls``."""
        return db.table(cls.table, model=cls, primary_key=cls.primary_key)

    @classmethod
    def from_row(cls: type[M], row: Mapping[str, Any]) -> M:
        """
        Build an instance from a result row.

        Columns that are not fields are ignored. Fields without a default must
        be present in the row.

        Raises:
            HydrationError: If a required field has no column in the row
        """
        fields = [f for f in dataclasses.fields(cls) if f.init]
        missing = [
            f.name
            for f in fields
            if f.name not in row
            and f.default is dataclasses.MISSING
            and f.default_factory is dataclasses.MISSING
        ]
        if missing:
            raise HydrationError(cls.__name__, missing, row)
        return cls(**{f.name: row[f.name] for f in fields if f.name in row})

    @classmethod
    def find(cls: type[M], db: "Database", keys: Any) -> M | list[M] | None:
        """
        Fetch by primary key.

        Returns the instance (or None) for a single key, a list for a
        list/tuple/set of keys.
        """
        if not _is_many(keys):
            return cls.query(db).where(cls.primary_key, keys).first()
        if not keys:
            return []
        return cls.query(db).or_where([(cls.primary_key, key) for key in keys]).get()

    @classmethod
    def all(cls: type[M], db: "Database") -> list[M]:
        return cls.query(db).get()

    @classmethod
    def where(cls, db: "Database", *clause: Any) -> "QueryBuilder":
        """Builder on this model's table with the given where clause applied."""
        return cls.query(db).where(*clause)

    @classmethod
    def create(cls: type[M], db: "Database", values: Mapping[str, Any]) -> M | None:
        """
        Insert a row from the fillable subset of ``values``.

        The new row is read back by its generated key so that database-side
        defaults are reflected in the returned instance.
        """
        attributes = {k: v for k, v in values.items() if k in cls.fillable}
        key = cls.query(db).insert(attributes)
        if key is None:
            return None
        return cls.find(db, key)

    @classmethod
    def destroy(cls, db: "Database", keys: Any) -> int:
        """Delete by primary key(s) and return the number of rows removed."""
        if not _is_many(keys):
            return cls.query(db).where(cls.primary_key, keys).limit(1).delete()
        keys = list(keys)
        if not keys:
            return 0
        return (
            cls.query(db)
            .or_where([(cls.primary_key, key) for key in keys])
            .limit(len(keys))
            .delete()
        )

    @property
    def key(self) -> Any:
        """Primary key value; None until the record is persisted."""
        return getattr(self, self.primary_key, None)

    def save(self, db: "Database") -> bool:
        """
        Insert the record if it has no primary key, update it otherwise.

        Returns:
            True when the statement ran; an update that changes nothing still
            counts. False only if an insert produced no row.
        """
        if self.key is None:
            return self._insert(db)
        return self._update(db)

    def _insert(self, db: "Database") -> bool:
        key = self.query(db).insert(self.get_attributes())
        if key is None:
            return False
        setattr(self, self.primary_key, key)
        return True

    def _update(self, db: "Database") -> bool:
        changed = self.query(db).where(self.primary_key, self.key).limit(1).update(self.get_attributes())
        logger.debug(f"Updated {type(self).__name__} {self.key}: {changed} row(s) changed")
        return True

    def delete(self, db: "Database") -> bool:
        """Delete this record's row. Returns False if it was never saved or is already gone."""
        if self.key is None:
            return False
        return bool(self.query(db).where(self.primary_key, self.key).limit(1).delete())

    def get_attributes(self) -> dict[str, Any]:
        """Fillable fields and their current values."""
        return {name: getattr(self, name) for name in self.fillable if hasattr(self, name)}

    def assign(self: M, values: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> M:
        """Set fields from a mapping or pairs. Keys that are not fields are ignored."""
        names = {f.name for f in dataclasses.fields(self)}
        items = values.items() if isinstance(values, Mapping) else values
        for name, value in items:
            if name in names:
                setattr(self, name, value)
        return self
