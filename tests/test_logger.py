import logging
from logging.handlers import RotatingFileHandler

from autoswe.logger import NOISY_LOGGERS, get_logger, setup_logging


def test_run_log_records_info_while_console_is_quiet(tmp_path):
    log_file = tmp_path / "logs" / "agent.log"
    logger = setup_logging(log_file=log_file, name="autoswe.test")

    console, run_log = logger.handlers
    assert console.level == logging.WARNING
    assert isinstance(run_log, RotatingFileHandler)
    assert run_log.level == logging.INFO

    get_logger("autoswe.test.agents").info("task-1: round 1/15")
    run_log.flush()
    assert "task-1: round 1/15" in log_file.read_text(encoding="utf-8")


def test_verbose_lowers_levels(tmp_path):
    logger = setup_logging(verbose=True, log_file=tmp_path / "a.log", name="autoswe.test.verbose")
    assert logger.handlers[0].level == logging.INFO
    assert logger.handlers[1].level == logging.DEBUG


def test_run_log_can_be_disabled():
    logger = setup_logging(log_file=False, name="autoswe.test.nofile")
    assert len(logger.handlers) == 1


def test_reconfigure_replaces_handlers(tmp_path):
    setup_logging(log_file=tmp_path / "a.log", name="autoswe.test.again")
    logger = setup_logging(log_file=tmp_path / "b.log", name="autoswe.test.again")
    assert len(logger.handlers) == 2
    assert logger.handlers[1].baseFilename.endswith("b.log")
    for noisy in NOISY_LOGGERS:
        assert logging.getLogger(noisy).level == logging.WARNING
