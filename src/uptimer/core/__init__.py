"""uptimer core -- storage, errors, settings and the scheduling engine.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (UptimerError, ...)
        protocols.py       Connection protocol
        timestamps.py      UTC helpers and the ISO-8601 storage encoding
        models/            Schedule / Job dataclasses, CheckMethod / JobType

    Layer 2 -- Database & Storage
        dialect.py         SQL placeholder dialect
        sqlite_conn.py     sqlite3 adapter (driver errors → RepositoryUnavailable)
        connection.py      Connection factory (create_connection)
        schema_loader.py   Applies schema/*.sql
        schema/            SQL DDL files

    Layer 3 -- Runtime
        logging.py         structlog configuration
        settings.py        UPTIMER_* settings (pydantic-settings)
        monitoring/        HTTP health checker + debounced status updater
        scheduling/        Cron, repositories, reconciler, dispatch loop
"""
