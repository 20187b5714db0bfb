"""Error types shared across the announcement core.

The HTTP layer (not part of this package) maps these to status codes:
NotFoundError -> 404, StorageUnavailableError -> 500.
"""


class BulletinError(Exception):
    """Base class for all Bulletin errors."""

    pass


class NotFoundError(BulletinError):
    """A referenced announcement or revision does not exist."""

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class StorageUnavailableError(BulletinError):
    """The underlying database cannot be reached."""

    pass
