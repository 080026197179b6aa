"""Exception hierarchy for DesktopDye."""


class DesktopDyeError(Exception):
    """Base class for all DesktopDye errors."""


class ConfigError(DesktopDyeError):
    """The config file is missing, unreadable or invalid."""


class PipelineError(DesktopDyeError):
    """A capture cycle could not produce final colors."""


class CaptureFailed(PipelineError):
    """Pixels could not be captured from the screen."""


class ExtractionFailed(PipelineError):
    """The dominant color algorithm failed or returned no colors."""


class HomeAssistantError(DesktopDyeError):
    """A request to the Home Assistant API failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
