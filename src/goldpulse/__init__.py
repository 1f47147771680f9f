"""goldpulse: recurring gold price digest delivered over Telegram."""

__version__ = "0.1.0"
