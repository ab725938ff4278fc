"""Exception taxonomy for the logo generation pipeline.

Every failure raised by the pipeline derives from AnimLogoError so the
workflow can convert it to user-facing text at a single boundary.
"""


class AnimLogoError(Exception):
    """Base class for pipeline failures."""


class CredentialMissingError(AnimLogoError):
    """Raised when an action needs an API key and none is selected."""


class CredentialExpiredError(AnimLogoError):
    """Raised when the key used to create a video job can no longer refresh it."""


class NoImageDataError(AnimLogoError):
    """Raised when an image response carries no inline image part."""


class ImageGenerationError(AnimLogoError):
    """Raised when the image generation request itself fails."""


class JobSubmitError(AnimLogoError):
    """Raised when the video job cannot be created."""


class JobPollError(AnimLogoError):
    """Raised when a video job status refresh fails."""


class PollTimeoutError(AnimLogoError, TimeoutError):
    """Raised when a video job is still running after the configured poll ceiling."""


class NoVideoResultError(AnimLogoError):
    """Raised when a finished video job has no usable result."""


class AssetFetchError(AnimLogoError):
    """Raised when the finished video cannot be downloaded."""


class WorkflowStateError(AnimLogoError):
    """Raised when an action is not allowed in the current workflow state."""


class WorkflowBusyError(WorkflowStateError):
    """Raised when an action starts while another one is still in flight."""
