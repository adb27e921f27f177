class FeedException(Exception):
    """
    Generic exception for the cp_gtfs library
    """


class ArgumentException(FeedException):
    """
    General Error to throw when command line or date inputs are malformed
    """


class ProviderException(FeedException):
    """
    General Error for failed or unusable responses from the data provider
    """


class MalformedTripError(ProviderException):
    """
    Trip detail that can not be converted into feed rows
    """

    def __init__(self, trip_id: str, reason: str):
        message = f"Unable to convert trip {trip_id}: {reason}"
        super().__init__(message)
        self.trip_id = trip_id


class ChannelClosedError(FeedException):
    """
    Raised when a streamed feed channel is written to or closed after it was closed
    """

    def __init__(self, channel_name: str):
        message = f"Feed channel {channel_name} is already closed"
        super().__init__(message)
        self.channel_name = channel_name
