"""Application services."""

from runreport.application.services.replay import ReplayResult, RunReplayer

__all__ = ["ReplayResult", "RunReplayer"]
