"""Tests for logging setup."""

import logging

import structlog

from courtmatch.logging import bind_run, configure_logging


def test_bind_run_sets_context():
    configure_logging("DEBUG")
    bind_run("research", dry_run=True)
    assert structlog.contextvars.get_contextvars() == {"command": "research", "dry_run": True}
    bind_run("cleanup")
    assert structlog.contextvars.get_contextvars() == {"command": "cleanup", "dry_run": False}
    structlog.contextvars.clear_contextvars()


def test_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "warning")
    configure_logging(None)
    assert logging.getLogger().level == logging.WARNING
    configure_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
