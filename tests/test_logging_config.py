import json
import logging

from app.core.logging_config import JsonFormatter, get_logging_config


def test_json_formatter_includes_extras():
    record = logging.LogRecord("app.services", logging.INFO, __file__, 10, "Debt %s created", (7,), None)
    record.debt_id = 7

    entry = json.loads(JsonFormatter().format(record))

    assert entry["level"] == "INFO"
    assert entry["logger"] == "app.services"
    assert entry["message"] == "Debt 7 created"
    assert entry["extra"] == {"debt_id": 7}


def test_logging_config_selects_formatter():
    assert get_logging_config("DEBUG", "json")["handlers"]["console"]["formatter"] == "json"
    config = get_logging_config("WARNING", "console")
    assert config["handlers"]["console"]["formatter"] == "verbose"
    assert config["loggers"]["app"]["level"] == "WARNING"
