"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "fanpanel"
    log_level: str = "INFO"
    version: str = "1.0.0"

    # Telemetry polling
    poll_interval_seconds: float = 3.0
    history_capacity: int = 20
    service_name: str = "argon_daemon"
    status_path: str = "/var/run/argon_fan.status"
    thermal_paths: list[str] = [
        "/sys/class/thermal/thermal_zone0/temp",
        "/sys/class/thermal/thermal_zone1/temp",
    ]

    # Persistent configuration
    config_path: str = "/etc/fanpanel/argononev3.json"

    # Allow-listed scripts
    fan_test_script: str = "/usr/bin/argon_fan_test.sh"
    service_script: str = "/etc/init.d/argon_daemon"
    update_script: str = "/usr/bin/argon_update.sh"

    # Operator actions
    action_cooldown_seconds: float = 5.0
    confirmation_ttl_seconds: float = 60.0

    # Release check
    release_url: str = (
        "https://api.github.com/repos/ciwga/luci-app-argononev3-fancontrol/releases/latest"
    )
    http_timeout_seconds: float = 10.0

    model_config = {"env_prefix": "FANPANEL_"}


settings = Settings()
