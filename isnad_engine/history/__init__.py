from isnad_engine.history.store import SearchHistoryStore

__all__ = ["SearchHistoryStore"]
