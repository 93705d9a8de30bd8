from .session import Base, DatabaseSessionManager, get_session_manager, initialize_database

__all__ = [
    "Base",
    "DatabaseSessionManager",
    "get_session_manager",
    "initialize_database",
]
