"""doorguard - relays door and motion sensor alerts to a Telegram chat."""

__version__ = "0.1.0"
