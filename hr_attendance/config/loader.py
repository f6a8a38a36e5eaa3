from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AppConfig, AttendanceRules, DatabaseConfig, SalaryRules

"""Config loader.

Responsibilities:
- Load YAML config (config/payroll.yml by default)
- Validate against the bundled JSON schema (unknown keys rejected)
- Apply defaults for every omitted key
- Resolve the PostgreSQL DSN (environment first, YAML as fallback)
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "load_config",
    "resolve_dsn",
]

DEFAULT_CONFIG_PATH = Path("config/payroll.yml")
SCHEMA_PATH = Path(__file__).with_name("schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data fails
            validation (wrong types, unknown keys, bad time format)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _parse_late_after(text: str) -> tuple[int, int]:
    hour_s, minute_s = text.split(":", 1)
    hour, minute = int(hour_s), int(minute_s)
    if hour > 23 or minute > 59:
        raise ConfigError(f"config validation failed: late_after out of range: {text}")
    return hour, minute


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )

    defaults = AttendanceRules()
    late_hour, late_minute = defaults.late_after_hour, defaults.late_after_minute
    if "late_after" in data:
        late_hour, late_minute = _parse_late_after(data["late_after"])
    attendance = AttendanceRules(
        header_scan_rows=data.get("header_scan_rows", defaults.header_scan_rows),
        late_after_hour=late_hour,
        late_after_minute=late_minute,
    )

    salary_raw = data.get("salary") or {}
    salary_defaults = SalaryRules()
    salary = SalaryRules(
        days_divisor=salary_raw.get("days_divisor", salary_defaults.days_divisor),
        free_leave_days=salary_raw.get("free_leave_days", salary_defaults.free_leave_days),
    )

    return AppConfig(
        database=db,
        attendance=attendance,
        salary=salary,
        error_log_dir=data.get("error_log_dir", "logs"),
    )


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the psycopg2 DSN.

    Priority:
        1. DATABASE_URL / PGDSN environment variables (whole DSN)
        2. the YAML `dsn`
        3. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE,
           each falling back to the YAML value, then to a local default
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn
