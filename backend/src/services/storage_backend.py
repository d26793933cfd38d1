"""Common interface for feedback storage backends."""

from models.feedback import FeedbackRecord
from utils.constants import DEFAULT_LIST_SEPARATOR


class FeedbackStorageError(Exception):
    """Raised when a backend cannot persist or read feedback."""

    pass


class StorageBackend:
    """Base class for a single-file feedback store.

    Subclasses set ``name`` and implement ``append``, ``load`` and ``path``.
    """

    name = "backend"
    # Joiner the normalizer should use for multi-select answers
    list_separator = DEFAULT_LIST_SEPARATOR
    # Skipped when the filesystem is ephemeral
    requires_persistent_storage = False

    @property
    def path(self):
        raise NotImplementedError

    def exists(self) -> bool:
        return self.path.exists()

    def append(self, record: FeedbackRecord) -> str:
        """Persist one record and return a human-readable message.

        Raises:
            FeedbackStorageError: If the record could not be written
        """
        raise NotImplementedError

    def load(self) -> list[dict[str, str]]:
        """Return every stored row keyed by header label.

        Raises:
            FeedbackStorageError: If the store exists but cannot be read
        """
        raise NotImplementedError
