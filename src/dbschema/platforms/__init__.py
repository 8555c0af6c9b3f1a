"""SQL platforms that render schema objects and diffs into DDL."""

from dbschema.exceptions import ConfigError
from dbschema.platforms.base import AbstractPlatform, Platform
from dbschema.platforms.mysql import MySQLPlatform
from dbschema.platforms.postgresql import PostgreSQLPlatform

PLATFORMS: dict[str, type[AbstractPlatform]] = {
    "ansi": AbstractPlatform,
    "postgresql": PostgreSQLPlatform,
    "postgres": PostgreSQLPlatform,
    "mysql": MySQLPlatform,
}


def get_platform(name: str) -> AbstractPlatform:
    """Return a platform instance for a name such as 'postgresql' or 'mysql'."""
    platform_class = PLATFORMS.get(name.lower())
    if platform_class is None:
        raise ConfigError(
            f"Unknown platform '{name}'. Available platforms: {', '.join(sorted(PLATFORMS))}"
        )
    return platform_class()


__all__ = [
    "AbstractPlatform",
    "MySQLPlatform",
    "Platform",
    "PostgreSQLPlatform",
    "get_platform",
]
