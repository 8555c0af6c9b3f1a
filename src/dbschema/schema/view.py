"""View definition."""

from dbschema.schema.asset import AbstractAsset


class View(AbstractAsset):
    """A named view and the SQL that defines it."""

    def __init__(self, name: str, sql: str):
        super().__init__()
        self._set_name(name)
        self.sql = sql
