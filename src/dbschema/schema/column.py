"""Column definition."""

import logging
from typing import Any, Optional, Union

from dbschema.schema.asset import AbstractAsset
from dbschema.types import Type, get_type

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 10
DEFAULT_SCALE = 0


def _to_int(value: Any, default: int) -> int:
    """Coerce numeric input to int, falling back to default."""
    if isinstance(value, bool):
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


class Column(AbstractAsset):
    """A table column: logical type plus constraints."""

    def __init__(
        self,
        name: str,
        column_type: Union[Type, str],
        options: Optional[dict[str, Any]] = None,
    ):
        super().__init__()
        self._set_name(name)
        self.type = column_type
        self._length: Optional[int] = None
        self._precision = DEFAULT_PRECISION
        self._scale = DEFAULT_SCALE
        self.unsigned = False
        self.fixed = False
        self.notnull = True
        self.default: Any = None
        self.autoincrement = False
        self.comment: Optional[str] = None
        self.column_definition: Optional[str] = None
        self._platform_options: dict[str, Any] = {}
        self._custom_schema_options: dict[str, Any] = {}
        self.set_options(options or {})

    @property
    def type(self) -> Type:
        return self._type

    @type.setter
    def type(self, value: Union[Type, str]) -> None:
        self._type = get_type(value) if isinstance(value, str) else value

    @property
    def length(self) -> Optional[int]:
        return self._length

    @length.setter
    def length(self, value: Any) -> None:
        self._length = None if value is None else _to_int(value, 0)

    @property
    def precision(self) -> int:
        return self._precision

    @precision.setter
    def precision(self, value: Any) -> None:
        self._precision = _to_int(value, DEFAULT_PRECISION)

    @property
    def scale(self) -> int:
        return self._scale

    @scale.setter
    def scale(self, value: Any) -> None:
        self._scale = _to_int(value, DEFAULT_SCALE)

    @property
    def platform_options(self) -> dict[str, Any]:
        return self._platform_options

    @platform_options.setter
    def platform_options(self, value: dict[str, Any]) -> None:
        self._platform_options = dict(value)

    def set_platform_option(self, name: str, value: Any) -> None:
        self._platform_options[name] = value

    def has_platform_option(self, name: str) -> bool:
        return name in self._platform_options

    def get_platform_option(self, name: str) -> Any:
        return self._platform_options[name]

    @property
    def custom_schema_options(self) -> dict[str, Any]:
        return self._custom_schema_options

    @custom_schema_options.setter
    def custom_schema_options(self, value: dict[str, Any]) -> None:
        self._custom_schema_options = dict(value)

    def set_custom_schema_option(self, name: str, value: Any) -> None:
        self._custom_schema_options[name] = value

    def has_custom_schema_option(self, name: str) -> bool:
        return name in self._custom_schema_options

    def get_custom_schema_option(self, name: str) -> Any:
        return self._custom_schema_options[name]

    def set_options(self, options: dict[str, Any]) -> "Column":
        """Apply known options; unknown keys are ignored.

        Keys match case-insensitively and ignoring underscores, so
        ``notnull``, ``notNull`` and ``not_null`` are the same option.
        """
        setters = {
            "type": "type",
            "length": "length",
            "precision": "precision",
            "scale": "scale",
            "unsigned": "unsigned",
            "fixed": "fixed",
            "notnull": "notnull",
            "default": "default",
            "autoincrement": "autoincrement",
            "comment": "comment",
            "columndefinition": "column_definition",
            "platformoptions": "platform_options",
            "customschemaoptions": "custom_schema_options",
        }
        for key, value in options.items():
            attribute = setters.get(key.replace("_", "").lower())
            if attribute is None:
                logger.debug(f"Ignoring unknown option '{key}' for column {self.name}")
                continue
            if attribute in ("unsigned", "fixed", "notnull", "autoincrement"):
                value = bool(value)
            setattr(self, attribute, value)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Flatten the column into one mapping, merging platform and custom options."""
        data = {
            "name": self.name,
            "type": self.type,
            "default": self.default,
            "notnull": self.notnull,
            "length": self.length,
            "precision": self.precision,
            "scale": self.scale,
            "fixed": self.fixed,
            "unsigned": self.unsigned,
            "autoincrement": self.autoincrement,
            "column_definition": self.column_definition,
            "comment": self.comment,
        }
        data.update(self._platform_options)
        data.update(self._custom_schema_options)
        return data
