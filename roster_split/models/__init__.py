"""Domain models for the roster splitter.

Cell values, roster records, configuration objects and batch results used
throughout the package.
"""

from .cell import EMPTY, Cell, Empty, Number, Text, cell_text, to_cell
from .config_models import GenerationConfig, ScoreOptions
from .error_record import ErrorRecord
from .processing_result import BatchResult, GeneratedDocument, ProgressUpdate, SubjectStat
from .roster import HeaderLocation, LoadedRoster, ParseResult, StudentRecord, SubjectRoster, SubjectStudent
from .validation import FileValidationResult

__all__ = [
    # Cell model
    "Cell",
    "Empty",
    "Number",
    "Text",
    "EMPTY",
    "to_cell",
    "cell_text",
    # Configuration models
    "GenerationConfig",
    "ScoreOptions",
    # Roster models
    "HeaderLocation",
    "LoadedRoster",
    "ParseResult",
    "StudentRecord",
    "SubjectRoster",
    "SubjectStudent",
    # Processing models
    "BatchResult",
    "ErrorRecord",
    "FileValidationResult",
    "GeneratedDocument",
    "ProgressUpdate",
    "SubjectStat",
]
