"""Key/value store backing the engine's load and save callbacks."""

from .repo import close_db, get_session, init_db, load_data, save_data

__all__ = ["close_db", "get_session", "init_db", "load_data", "save_data"]
