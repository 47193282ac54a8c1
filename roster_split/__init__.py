"""Split a student roster workbook into one score sheet per subject.

Typical flow::

    loaded = load_roster(Path("roster.xlsx"), config=config)
    batch = process_all(loaded.result.rosters, config)
    Path(batch.archive_filename).write_bytes(batch.archive)
"""

from .config.loader import ConfigError, load_config
from .logging.init import setup_logging
from .models import GenerationConfig, ScoreOptions
from .services.orchestrator import generate_single, load_roster, process_all

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "GenerationConfig",
    "ScoreOptions",
    "generate_single",
    "load_config",
    "load_roster",
    "process_all",
    "setup_logging",
]
