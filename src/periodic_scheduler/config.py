"""Configuration - default delay policy settings."""
import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass
class Settings:
    """Scheduler settings."""

    # Delays, in milliseconds
    first_delay_ms: int = 0
    interval_ms: int = 5000
    failure_delay_ms: int = 3000

    # Label used in log lines and events
    scheduler_name: str = "periodic-job"

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables (and a .env file, if present)."""
        load_dotenv()

        return cls(
            first_delay_ms=int(os.getenv("PERIODIC_SCHEDULER_FIRST_DELAY_MS", "0")),
            interval_ms=int(os.getenv("PERIODIC_SCHEDULER_INTERVAL_MS", "5000")),
            failure_delay_ms=int(os.getenv("PERIODIC_SCHEDULER_FAILURE_DELAY_MS", "3000")),
            scheduler_name=os.getenv("PERIODIC_SCHEDULER_NAME", "periodic-job"),
        )
