"""goldpulse.core: Foundation types, config, formatting and exceptions."""

from goldpulse.core.config import (
    BtmcSourceConfig,
    DojiSourceConfig,
    GoldPulseConfig,
    HttpConfig,
    ReportConfig,
    ScheduleConfig,
    SourcesConfig,
    TelegramConfig,
    WorldSourceConfig,
    load_config,
)
from goldpulse.core.exceptions import (
    ConfigError,
    GoldPulseError,
    NotificationError,
    ParsingError,
    SourceFailure,
)
from goldpulse.core.formatting import format_number
from goldpulse.core.models import (
    CycleResult,
    LabeledRow,
    LocalPriceRow,
    LocalPriceTable,
    Report,
    ReportSection,
    SourceOutcome,
    WorldQuote,
)

__all__ = [
    # Models
    "WorldQuote",
    "LocalPriceRow",
    "LabeledRow",
    "LocalPriceTable",
    "SourceOutcome",
    "ReportSection",
    "Report",
    "CycleResult",
    # Formatting
    "format_number",
    # Config
    "GoldPulseConfig",
    "SourcesConfig",
    "WorldSourceConfig",
    "DojiSourceConfig",
    "BtmcSourceConfig",
    "TelegramConfig",
    "ScheduleConfig",
    "HttpConfig",
    "ReportConfig",
    "load_config",
    # Exceptions
    "GoldPulseError",
    "ConfigError",
    "SourceFailure",
    "ParsingError",
    "NotificationError",
]
