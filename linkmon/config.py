"""Monitor configuration with environment variable overrides."""

import os
from dataclasses import dataclass

from linkmon.history import DEFAULT_CAPACITY


@dataclass
class MonitorConfig:
    """Configuration for ConnectivityMonitor and the UI.

    Environment Variables (see from_env):
        LINKMON_STATUS_INTERVAL_MS: Status poll period (default 10000)
        LINKMON_METRICS_INTERVAL_MS: Metrics refresh period (default 5000)
        LINKMON_HISTORY_CAPACITY: Transition history size (default 15)
        LINKMON_HISTORY_ON_MEDIUM_CHANGE: Also record medium changes (default off)
        LINKMON_UI_REFRESH_MS: UI pull cadence (default 2000)
        LINKMON_QUERY_TIMEOUT_MS: Platform query timeout (default 1000)
        LINKMON_SEED: Random seed for synthetic metrics (default unseeded)
    """

    status_interval_ms: int = 10000
    metrics_interval_ms: int = 5000
    history_capacity: int = DEFAULT_CAPACITY
    history_on_medium_change: bool = False
    ui_refresh_ms: int = 2000
    query_timeout_ms: int = 1000
    seed: int | None = None

    def __post_init__(self):
        """Reject values that would break scheduling or retention."""
        for name in ("status_interval_ms", "metrics_interval_ms", "ui_refresh_ms", "query_timeout_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.history_capacity < 1:
            raise ValueError("history_capacity must be at least 1")

    @classmethod
    def from_env(cls, environ=None) -> "MonitorConfig":
        """Build a config from LINKMON_* environment variables.

        Raises:
            ValueError: If a variable is set but cannot be parsed
        """
        if environ is None:
            environ = os.environ

        kwargs = {}
        int_vars = {
            "LINKMON_STATUS_INTERVAL_MS": "status_interval_ms",
            "LINKMON_METRICS_INTERVAL_MS": "metrics_interval_ms",
            "LINKMON_HISTORY_CAPACITY": "history_capacity",
            "LINKMON_UI_REFRESH_MS": "ui_refresh_ms",
            "LINKMON_QUERY_TIMEOUT_MS": "query_timeout_ms",
            "LINKMON_SEED": "seed",
        }
        for var, field_name in int_vars.items():
            raw = environ.get(var, "").strip()
            if not raw:
                continue
            try:
                kwargs[field_name] = int(raw)
            except ValueError:
                raise ValueError(f"{var} must be an integer, got {raw!r}") from None

        flag = environ.get("LINKMON_HISTORY_ON_MEDIUM_CHANGE", "").strip().lower()
        if flag:
            if flag in ("1", "true", "yes", "on"):
                kwargs["history_on_medium_change"] = True
            elif flag in ("0", "false", "no", "off"):
                kwargs["history_on_medium_change"] = False
            else:
                raise ValueError(f"LINKMON_HISTORY_ON_MEDIUM_CHANGE must be a boolean, got {flag!r}")

        return cls(**kwargs)
