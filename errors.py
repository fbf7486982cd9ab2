"""Error types shared by the momentum pipeline."""


class MomentumError(Exception):
    """Base error raised by the momentum pipeline."""

    status = 500


class ClientInputError(MomentumError):
    """Raised when the caller asked for something the pipeline cannot serve."""

    status = 400


class UpstreamUnavailableError(MomentumError):
    """Raised when a market-data provider fails or returns a non-success status."""

    status = 503


class InternalError(MomentumError):
    """Raised for computation faults that indicate a bug."""

    status = 500
