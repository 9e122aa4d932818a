"""Exception hierarchy for booklend."""


class BooklendError(Exception):
    """Base class for all booklend errors."""


class LendingError(BooklendError, ValueError):
    """Raised when a lend or return request cannot be honoured."""


class ReminderStoreError(BooklendError):
    """Raised when the reminder store cannot read or write loan state."""


class NotificationError(BooklendError):
    """Raised inside a notifier when a message cannot be delivered."""


class NotifierNotConfiguredError(NotificationError):
    """Raised when the notifier has no usable delivery settings."""
