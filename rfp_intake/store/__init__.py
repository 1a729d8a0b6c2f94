"""Record store for RFP Intake."""

from rfp_intake.store.base import RecordStore
from rfp_intake.store.database import create_db_engine, init_schema
from rfp_intake.store.sql_store import SQLRecordStore

__all__ = ["RecordStore", "SQLRecordStore", "create_db_engine", "init_schema"]
