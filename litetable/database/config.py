"""Database location per environment."""

from pathlib import Path

from litetable.log import get_logger
from litetable.types import Environment

from .connection import MEMORY_DATABASE

logger = get_logger(__name__)


class DatabaseConfig:
    """Database file layout for an environment."""

    def __init__(
        self,
        environment: Environment = Environment.DEVELOPMENT,
        base_dir: Path | None = None,
    ) -> None:
        """Initialize database configuration.

        Args:
            environment: Environment type (development, testing, production)
            base_dir: Directory holding the ``db`` folder; defaults to cwd
        """
        self.environment = environment
        self._base_dir = base_dir or Path.cwd()

    @property
    def database_dir(self) -> Path:
        return self._base_dir / "db"

    @property
    def database_path(self) -> str:
        """Database location; testing always uses an in-memory database."""
        if self.environment == Environment.TESTING:
            return MEMORY_DATABASE
        if self.environment == Environment.DEVELOPMENT:
            return str(self.database_dir / "litetable.dev.db")
        if self.environment == Environment.PRODUCTION:
            return str(self.database_dir / "litetable.db")
        raise ValueError(f"Unknown environment: {self.environment}")


def resolve_database_path(
    environment: Environment, db_path: str | Path | None = None
) -> str:
    """Database location for an environment, unless an explicit path is given.

    Args:
        environment: Environment type
        db_path: Optional custom database path, or ``:memory:``

    Returns:
        Path string accepted by :class:`SQLiteConnection`
    """
    if db_path is not None:
        return str(db_path)

    path = DatabaseConfig(environment).database_path
    logger.debug(f"Database for {environment.value}: {path}")
    return path
