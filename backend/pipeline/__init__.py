"""Import pipeline: parse -> link -> attribute, one transaction per fixture."""

from .importer import FixtureImporter, import_fixtures, is_transient, parse_records
from .types import FixtureOutcome, ImportReport

__all__ = [
    "FixtureImporter",
    "FixtureOutcome",
    "ImportReport",
    "import_fixtures",
    "is_transient",
    "parse_records",
]
