"""Exception taxonomy for the annotator.

Source-level errors (SourceUnavailableError, UnsupportedSourceTypeError,
MalformedAnnotationError, InvalidArnError) skip one physical table.
MalformedOperationError skips one logical table.
Dataset-level errors (NotFoundError, RemoteConflictError, TransportError)
abort the run and reach the caller unmodified.
"""


class AnnotatorError(Exception):
    """Base exception for all annotator errors."""


class SourceUnavailableError(AnnotatorError):
    """The warehouse or its query could not be reached."""


class ProfileNotConfiguredError(SourceUnavailableError):
    """No usable Redshift connection profile for a host."""

    def __init__(self, host: str, missing: str):
        self.host = host
        self.missing = missing
        super().__init__(
            f"redshift {missing} not configured for {host or '[default]'}, "
            "please execute `redshift-dataset-annotator configure`"
        )


class UnsupportedSourceTypeError(AnnotatorError):
    """The data source is not a Redshift data source."""


class MalformedAnnotationError(AnnotatorError):
    """An annotation row is missing its column name."""


class MalformedOperationError(AnnotatorError):
    """A transform operation could not be parsed."""


class InvalidArnError(AnnotatorError):
    """An ARN is malformed or does not name the expected resource."""


class NotFoundError(AnnotatorError):
    """The dataset or data source does not exist."""


class RemoteConflictError(AnnotatorError):
    """The update was rejected because the dataset changed concurrently."""


class TransportError(AnnotatorError):
    """Any other failure talking to the BI service."""


class ConfigFileError(AnnotatorError):
    """The profile configuration file could not be read or written."""
