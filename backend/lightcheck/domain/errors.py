"""Error taxonomy shared by the clients, the review session and the API."""

from __future__ import annotations


class LightcheckError(Exception):
    """Base class for recoverable application errors."""


class ConfigurationError(LightcheckError):
    """A required setting (queue endpoint, classifier credential) is missing."""


class QueueError(LightcheckError):
    """The queue backend could not be reached or answered with a non-2xx status."""


class PayloadValidationError(LightcheckError):
    """A remote payload did not match its expected schema."""


class QueuePayloadError(QueueError, PayloadValidationError):
    """The queue backend answered with a malformed payload."""


class SchemaValidationError(PayloadValidationError):
    """Classifier output failed schema or model validation."""


class ClassifierError(LightcheckError):
    """Image retrieval or classification failed for one image."""


class RecordNotFoundError(LightcheckError):
    def __init__(self, image_id: str):
        super().__init__(f"Image not found: {image_id}")
        self.image_id = image_id


class ResetNotConfirmedError(LightcheckError):
    """Queue reset was requested without the explicit confirmation flag."""


class ExportError(LightcheckError):
    """The report could not be rendered or written."""
