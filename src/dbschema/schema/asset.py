"""Naming and quoting shared by every schema object."""

import zlib
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from dbschema.platforms.base import Platform

QUOTE_CHARACTERS = ("`", '"', "[")
_TRIMMED_CHARACTERS = ("`", '"', "[", "]")


def is_identifier_quoted(identifier: str) -> bool:
    """Check if a raw identifier starts with a quote delimiter."""
    return bool(identifier) and identifier[0] in QUOTE_CHARACTERS


def trim_quotes(identifier: str) -> str:
    """Strip every quote delimiter from an identifier."""
    for char in _TRIMMED_CHARACTERS:
        identifier = identifier.replace(char, "")
    return identifier


def generate_identifier_name(
    column_names: Iterable[str], prefix: str = "", max_size: int = 30
) -> str:
    """Build a deterministic, length-bounded name from a list of column names.

    Each name is hashed with CRC32 and rendered as hex. The result is
    ``PREFIX_HASHES`` upper-cased and cut to ``max_size`` characters.
    """
    hashes = "".join(
        format(zlib.crc32(name.encode("utf-8")), "x") for name in column_names
    )
    return f"{prefix}_{hashes}".upper()[:max_size]


class AbstractAsset:
    """Base class for named, quotable schema objects.

    A name like ``"Users"`` is stored unquoted with ``quoted`` set. A dotted
    name like ``app.users`` carries the namespace ``app``.
    """

    def __init__(self) -> None:
        self._name = ""
        self._namespace: Optional[str] = None
        self._quoted = False

    def _set_name(self, name: Optional[str]) -> None:
        name = name or ""
        if is_identifier_quoted(name):
            self._quoted = True
            name = trim_quotes(name)
        if "." in name:
            namespace, _, name = name.partition(".")
            self._namespace = namespace
        else:
            self._namespace = None
        self._name = name

    @property
    def name(self) -> str:
        """Name including the namespace prefix, if any."""
        if self._namespace:
            return f"{self._namespace}.{self._name}"
        return self._name

    def get_name(self) -> str:
        return self.name

    @property
    def quoted(self) -> bool:
        return self._quoted

    def is_quoted(self) -> bool:
        return self._quoted

    @property
    def namespace_name(self) -> Optional[str]:
        return self._namespace

    def is_in_default_namespace(self, default_namespace: str) -> bool:
        return self._namespace is None or self._namespace == default_namespace

    def get_shortest_name(self, default_namespace: Optional[str]) -> str:
        """Lower-cased name, dropping the namespace when it is the default one."""
        shortest = self.name
        if self._namespace == default_namespace:
            shortest = self._name
        return shortest.lower()

    def get_full_qualified_name(self, default_namespace: str) -> str:
        """Lower-cased ``namespace.name``, using the default namespace if unset."""
        name = self.name
        if not self._namespace:
            name = f"{default_namespace}.{name}"
        return name.lower()

    def get_quoted_name(self, platform: "Platform") -> str:
        """Name as it appears in SQL for the given platform."""
        parts = self.name.split(".")
        if self._quoted:
            parts = [platform.quote_identifier(part) for part in parts]
        return ".".join(parts)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class Identifier(AbstractAsset):
    """A bare name, used wherever only quoting rules matter."""

    def __init__(self, identifier: str, quote: bool = False):
        super().__init__()
        self._set_name(identifier)
        if quote and not self._quoted:
            self._set_name(f'"{self.name}"')
