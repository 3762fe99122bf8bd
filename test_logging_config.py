import logging

import logging_config


def test_app_logger_writes_through_one_handler():
    assert logging_config.logger.name == "skysmart"
    assert len(logging_config.logger.handlers) == 1
    assert logging_config.logger.propagate is False


def test_get_logger_does_not_stack_handlers():
    first = logging_config.get_logger("skysmart.audit", "debug")
    second = logging_config.get_logger("skysmart.audit", "debug")

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG
    assert second.handlers[0].formatter._fmt == logging_config.LOG_FORMAT


def test_unknown_level_falls_back_to_info():
    log = logging_config.get_logger("skysmart.quiet", "chatty")
    assert log.level == logging.INFO
