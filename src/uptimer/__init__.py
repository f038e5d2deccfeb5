"""
Uptimer - cron-driven uptime monitoring on a durable job queue.

- uptimer.core: Errors, logging, settings, storage and the scheduling engine
- uptimer.cli: Typer command-line interface
"""

__version__ = "0.1.0"

USER_AGENT = f"Uptimer/{__version__}"
