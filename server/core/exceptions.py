"""Portfolio exception hierarchy."""


class PortfolioError(Exception):
    """Base exception for all portfolio errors."""


class BaserowError(PortfolioError):
    """Error returned by (or while talking to) the Baserow API."""

    def __init__(self, table_id: int, message: str, status_code: int = None):
        self.table_id = table_id
        self.status_code = status_code
        super().__init__(f"[table {table_id}] {message}")


class StaticSnapshotError(PortfolioError):
    """The static projects snapshot could not be read or parsed."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"[{path}] {message}")


class ConfigurationError(PortfolioError):
    """Invalid or incomplete configuration."""
