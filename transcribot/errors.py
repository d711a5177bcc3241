"""
transcribot.errors - Exception taxonomy.

Every per-run failure inherits from PipelineError so the pipeline can turn it
into a single report. Configuration problems raise ValueError at startup.
"""


class TranscribotError(Exception):
    """Base exception for all transcribot errors."""

    pass


class NotSelectedError(TranscribotError, KeyError):
    """The requester has no backend recorded in the selection store."""

    def __init__(self, requester_id: str):
        self.requester_id = requester_id
        super().__init__(f"no backend selected for {requester_id}")

    def __str__(self) -> str:
        return self.args[0]


class PipelineError(TranscribotError):
    """A stage of a pipeline run failed."""

    kind = "pipeline error"


class FetchError(PipelineError):
    """Download or local write failure."""

    kind = "download failed"


class TranscodeError(PipelineError):
    """External decode/resample failure."""

    kind = "conversion failed"


class UnknownBackendError(PipelineError):
    """Backend name is not registered."""

    kind = "unknown backend"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"backend {name!r} is not registered")


class NoBackendSelectedError(PipelineError):
    """Audio arrived before the requester chose a backend."""

    kind = "no backend selected"

    def __init__(self, requester_id: str):
        self.requester_id = requester_id
        super().__init__(f"requester {requester_id} has not chosen a backend")


class TranscribeError(PipelineError):
    """Backend-specific speech recognition failure."""

    kind = "recognition failed"


class DeliveryError(PipelineError):
    """Transport refused or failed to send the transcript."""

    kind = "delivery failed"
