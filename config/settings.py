import os
from typing import Dict, Any, List, Optional


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int_list(value: str) -> List[int]:
    return [int(part) for part in value.split(",") if part.strip()]


def _parse_optional_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


def get_rabbitmq_config() -> Dict[str, Any]:
    """Get RabbitMQ configuration from environment variables"""
    return {
        "host": os.getenv("RABBITMQ_HOST", "localhost"),
        "port": int(os.getenv("RABBITMQ_PORT", 5672)),
        "vhost": os.getenv("RABBITMQ_VHOST", "/"),
        "username": os.getenv("RABBITMQ_USERNAME", "guest"),
        "password": os.getenv("RABBITMQ_PASSWORD", "guest"),
        "queue_name": os.getenv("RABBITMQ_QUEUE", "timetable"),
        "heartbeat": int(os.getenv("RABBITMQ_HEARTBEAT", 600)),
        "connection_attempts": int(os.getenv("RABBITMQ_CONNECTION_ATTEMPTS", 3)),
        "retry_delay": int(os.getenv("RABBITMQ_RETRY_DELAY", 5)),
        "blocked_connection_timeout": int(os.getenv("RABBITMQ_BLOCKED_TIMEOUT", 300)),
        "socket_timeout": int(os.getenv("RABBITMQ_SOCKET_TIMEOUT", 10)),
        "max_reconnect_attempts": int(os.getenv("RABBITMQ_MAX_RECONNECT_ATTEMPTS", 10)),
        "reconnect_delay": float(os.getenv("RABBITMQ_RECONNECT_DELAY", 5)),
        "max_reconnect_delay": float(os.getenv("RABBITMQ_MAX_RECONNECT_DELAY", 60)),
    }


def get_app_config() -> Dict[str, Any]:
    """Get application configuration from environment variables"""
    return {
        "debug": os.getenv("DEBUG", "False").lower() == "true",
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
    }


def get_scheduler_config() -> Dict[str, Any]:
    """
    Get default timetable generation settings from environment variables.

    Requests may override every value except the output encoding.
    """
    return {
        "working_days": int(os.getenv("WORKING_DAYS", 5)),
        "hours_per_day": int(os.getenv("HOURS_PER_DAY", 5)),
        "break_slots": _parse_int_list(os.getenv("BREAK_SLOTS", "")),
        "free_period_percentage": float(os.getenv("FREE_PERIOD_PERCENTAGE", 20)),
        "seed": _parse_optional_int(os.getenv("RANDOM_SEED")),
        "carry_over_hours": _parse_bool(os.getenv("CARRY_OVER_HOURS", "False")),
        "day_start": os.getenv("DAY_START") or None,
        "period_minutes": int(os.getenv("PERIOD_MINUTES", 60)),
        "encode_as_string": _parse_bool(os.getenv("TIMETABLE_ENCODE_AS_STRING", "True")),
    }
