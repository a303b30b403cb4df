from typing import Optional


class ValidationError(ValueError):
    """A transaction record that cannot enter aggregation or export."""

    def __init__(self, record_id: Optional[str], field: str, message: str):
        self.record_id = record_id
        self.field = field
        self.message = message
        super().__init__(f"Transaction {record_id or '<unknown>'}: invalid {field}: {message}")

    def to_dict(self) -> dict:
        return {
            "error": "invalid_transaction",
            "record_id": self.record_id,
            "field": self.field,
            "message": self.message,
        }


class ExportError(Exception):
    pass


class NothingToExportError(ExportError):
    def __init__(self, message: str = "No data available to export."):
        super().__init__(message)
