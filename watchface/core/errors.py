"""
Errors - Exception taxonomy for the watch face engine
"""


class WatchFaceError(Exception):
    """Base class for all watch face errors."""


class AssetError(WatchFaceError):
    """
    Missing or invalid bitmap asset.
    Fatal: the engine refuses to start rather than render partial frames.
    """


class AssetNotFound(AssetError):
    """Asset source has no asset with the requested id."""

    def __init__(self, asset_id: str, detail: str = ''):
        self.asset_id = asset_id
        message = f"Asset not found: {asset_id}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class RenderError(WatchFaceError):
    """
    Geometry and scaled assets are out of step with each other.
    Recoverable: the frame is skipped and the next resize resolves it.
    """


class SchedulingInconsistency(WatchFaceError):
    """
    Timer fire delivered while the scheduler is idle.
    Only ever logged, never raised out of the scheduler.
    """
