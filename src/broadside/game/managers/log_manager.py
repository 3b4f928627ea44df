"""
Log management for combat messages and debugging.

Components never print or use a logger directly: they publish LogMessage
events on the battle's EventManager, and the LogManager collects them into a
bounded, filterable buffer.
"""
import os
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ...core.events import EventManager


class LogCategory(Enum):
    """Categories for log messages."""
    SYSTEM = auto()     # Battle setup, configuration
    BATTLE = auto()     # Attacks, deaths, surrenders
    TURN = auto()       # Round and turn transitions
    EFFECT = auto()     # Status effect application and ticks
    RESOURCE = auto()   # Energy and grog
    DEBUG = auto()
    WARNING = auto()
    ERROR = auto()


CATEGORY_TAGS = {
    LogCategory.SYSTEM: "SYS",
    LogCategory.BATTLE: "BTL",
    LogCategory.TURN: "TRN",
    LogCategory.EFFECT: "EFX",
    LogCategory.RESOURCE: "RES",
    LogCategory.DEBUG: "DBG",
    LogCategory.WARNING: "WRN",
    LogCategory.ERROR: "ERR",
}


class LogLevel(Enum):
    """Log levels for filtering."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass
class LogEntry:
    """A single stored log line with metadata."""
    text: str
    category: LogCategory
    level: LogLevel = LogLevel.INFO
    source: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def format(self, include_timestamp: bool = False, include_category: bool = True) -> str:
        """Format the message for display."""
        parts = []

        if include_timestamp:
            parts.append(f"[{self.timestamp.strftime('%H:%M:%S')}]")

        if include_category:
            parts.append(f"[{CATEGORY_TAGS.get(self.category, '???')}]")

        parts.append(self.text)
        return " ".join(parts)


class LogManager:
    """Collects LogMessage events with categorization and filtering."""

    def __init__(
        self,
        event_manager: "EventManager",
        max_messages: int = 1000,
        default_level: LogLevel = LogLevel.INFO
    ):
        """Initialize the log manager.

        Args:
            event_manager: Event manager to collect LogMessage events from
            max_messages: Maximum number of messages to store in the buffer
            default_level: Minimum level returned by get_messages
        """
        self.messages: deque[LogEntry] = deque(maxlen=max_messages)
        self.log_level = default_level
        self.enabled_categories = set(LogCategory)
        self.event_manager = event_manager

        self._setup_event_subscriptions()

    def _setup_event_subscriptions(self) -> None:
        from ...core.events import EventType

        self.event_manager.subscribe(
            EventType.LOG_MESSAGE,
            self._handle_log_message_event,
            subscriber_name="LogManager.log_message"
        )

    def _handle_log_message_event(self, event) -> None:
        from ...core.events import LogMessage as LogEvent
        if isinstance(event, LogEvent):
            try:
                category = LogCategory[event.category.upper()]
            except (KeyError, AttributeError):
                category = LogCategory.SYSTEM

            level = event.level if isinstance(event.level, LogLevel) else LogLevel.INFO
            self.messages.append(
                LogEntry(text=event.message, category=category, level=level, source=event.source)
            )

    def log(self, text: str, category: LogCategory = LogCategory.SYSTEM,
            level: LogLevel = LogLevel.INFO) -> None:
        """Add a message to the log directly."""
        self.messages.append(LogEntry(text=text, category=category, level=level))

    def warning(self, text: str) -> None:
        self.log(text, LogCategory.WARNING, LogLevel.WARNING)

    def error(self, text: str) -> None:
        self.log(text, LogCategory.ERROR, LogLevel.ERROR)

    def get_messages(self, count: Optional[int] = None,
                     categories: Optional[set[LogCategory]] = None) -> list[LogEntry]:
        """Get recent messages, optionally filtered by category.

        Args:
            count: Maximum number of messages to return (None for all)
            categories: Set of categories to include (None for all enabled)

        Returns:
            List of recent messages, oldest first
        """
        filtered = []
        for msg in self.messages:
            if msg.category not in self.enabled_categories:
                continue
            if categories is not None and msg.category not in categories:
                continue
            if msg.level.value < self.log_level.value:
                continue
            filtered.append(msg)

        if count is not None and count < len(filtered):
            return filtered[-count:]
        return filtered

    def clear(self) -> None:
        self.messages.clear()

    def enable_category(self, category: LogCategory) -> None:
        self.enabled_categories.add(category)

    def disable_category(self, category: LogCategory) -> None:
        self.enabled_categories.discard(category)

    def set_log_level(self, level: LogLevel) -> None:
        """Set the minimum log level."""
        self.log_level = level

    def save_log_to_file(self, log_dir: str = "logs") -> Optional[str]:
        """Save every buffered message, ignoring filters, to a timestamped file.

        Returns:
            Path of the written file, or None if writing failed
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = os.path.join(log_dir, f"battle_{timestamp}.log")

        try:
            os.makedirs(log_dir, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("Broadside - Battle Log\n")
                f.write("=" * 60 + "\n\n")

                if not self.messages:
                    f.write("No messages to save.\n")
                for msg in self.messages:
                    timestamp_str = msg.timestamp.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
                    f.write(f"[{timestamp_str}] [{msg.category.name}] [{msg.level.name}] {msg.text}\n")
        except OSError as e:
            self.error(f"Failed to save log file: {e}")
            return None

        self.log(f"Battle log saved to {filepath}")
        return filepath
