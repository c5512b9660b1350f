"""Error taxonomy shared by the request pipeline and the HTTP layer."""


class ServiceError(Exception):
    """Base class for errors reported to the caller as plain text."""

    status_code = 500
    summary: str | None = None

    def detail(self) -> str:
        """Message sent back in the response body."""
        if self.summary:
            return f"{self.summary}: {self}"
        return str(self)


class ClientInputError(ServiceError):
    """Bad request: unparsable form, oversized upload or missing file."""

    status_code = 400


class ConversionError(ServiceError):
    """The conversion could not be run or the external tool failed."""

    summary = "Error processing image"

    def __init__(self, message: str, *, returncode: int | None = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


class UnsupportedFormatError(ConversionError):
    """Requested output format has no argument mapping."""

    def __init__(self, output_format: str):
        super().__init__(f"unsupported output format: {output_format}")


class PublishError(ServiceError):
    """Reading the converted file or uploading it to storage failed."""

    summary = "Error publishing image"
