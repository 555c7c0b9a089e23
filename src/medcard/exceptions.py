"""Exception hierarchy for medcard."""


class MedcardError(Exception):
    """Base exception for all medcard errors."""


class InvalidRequest(MedcardError):
    """Required request fields are missing or empty."""


class UpstreamError(MedcardError):
    """An external collaborator (store, gateway, blob storage) failed."""


class UpstreamStoreError(UpstreamError):
    """History, profile, encounter or record read/write failed."""


class RecordNotFoundError(UpstreamStoreError):
    """A keyed single-row lookup found nothing."""


class UpstreamGatewayError(UpstreamError):
    """The language model gateway call failed."""


class BlobStoreError(UpstreamError):
    """Upload or signed-URL issuance failed."""


class MalformedModelOutput(MedcardError):
    """Tool-call arguments or JSON-mode output could not be parsed."""

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response
