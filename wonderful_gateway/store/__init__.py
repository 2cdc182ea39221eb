from wonderful_gateway.store.base import MemoryNoticeSink, Notice, NoticeSink, OrderStore
from wonderful_gateway.store.sql_store import SqlOrderStore, pop_notices, save_notices

__all__ = [
    "OrderStore",
    "NoticeSink",
    "Notice",
    "MemoryNoticeSink",
    "SqlOrderStore",
    "save_notices",
    "pop_notices",
]
