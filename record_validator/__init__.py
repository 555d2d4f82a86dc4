"""
record-validator: declarative validation of records and single values

This library provides:
- Chainable checks for single values (ValueValidator)
- Upload descriptor checks (FileValidator)
- Record validation against declarative rule sets (RecordValidator)
- Cross-field references ("@field") between rules
- Localized labels and message catalogs with a built-in default catalog
- A configuration-driven service and a JSON-RPC server

Example:
    from record_validator import RecordValidator

    validator = RecordValidator(
        {"name": "izisaurio", "age": 30},
        {"name": {"maxLength": 5}, "age": {"isInt": True, "max": 25}},
    )
    if not validator.validate():
        print(validator.get_errors())
"""

from .api import ValidationService
from .files import FileValidator, UploadError
from .messages import CatalogFormatter, FallbackFormatter, MessageFormatter
from .record import RecordValidator
from .rule_schema import RuleSetError
from .value import ValueValidator

__version__ = "0.1.0"
__all__ = [
    "ValidationService",
    "RecordValidator",
    "ValueValidator",
    "FileValidator",
    "UploadError",
    "MessageFormatter",
    "CatalogFormatter",
    "FallbackFormatter",
    "RuleSetError",
]
