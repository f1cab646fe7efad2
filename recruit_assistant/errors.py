class RecruitAssistantError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500
    error = "Failed to process request"

    def __init__(self, details: str = ""):
        super().__init__(details)
        self.details = details


class ClientError(RecruitAssistantError):
    status_code = 400
    error = "Invalid request"


class MethodError(RecruitAssistantError):
    status_code = 405
    error = "Method not allowed"


class ConfigurationError(RecruitAssistantError):
    status_code = 500
    error = "Server configuration error"


class UpstreamFailure(RecruitAssistantError):
    """The assistant run ended in a terminal state other than ``completed``."""

    status_code = 500
    error = "Failed to get response"


class AnalyticsFailure(RecruitAssistantError):
    """Storage-layer error while recording or reading question analytics."""

    status_code = 500
    error = "Failed to fetch analytics"
