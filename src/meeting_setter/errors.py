"""Exception hierarchy for failures that cross component boundaries."""


class MeetingSetterError(Exception):
    """Base class for all package errors."""


class GenerationServiceError(MeetingSetterError):
    """The text-generation service failed, timed out or returned nothing usable."""


class PersistenceError(MeetingSetterError):
    """The meeting store could not be read or written."""


class TransportDeliveryError(MeetingSetterError):
    """An outbound message could not be delivered."""
