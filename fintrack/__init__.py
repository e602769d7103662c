from fintrack.fintrack import FinTrackService

__all__ = ["FinTrackService"]
