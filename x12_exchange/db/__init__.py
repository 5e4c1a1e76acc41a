"""Database layer package for all SQL and persistence boundaries."""

from .control_numbers import SQLAlchemyControlNumberService
from .execution_ledger import SQLAlchemyExecutionLedgerService
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	ControlNumberIssuerPort,
	DatabaseHealthPort,
	ExecutionLedgerPort,
	ExecutionRecord,
	KeyValueStorePort,
)
from .key_value import SQLAlchemyKeyValueStoreService
from .session import db_create_engine

__all__ = [
	"ControlNumberIssuerPort",
	"DatabaseHealthPort",
	"ExecutionLedgerPort",
	"ExecutionRecord",
	"KeyValueStorePort",
	"SQLAlchemyControlNumberService",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyExecutionLedgerService",
	"SQLAlchemyKeyValueStoreService",
	"db_create_engine",
]
