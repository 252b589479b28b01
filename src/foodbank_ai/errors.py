"""Exceptions raised to callers of the engine."""


class MissingDataError(ValueError):
    """A required collection (inventory, suppliers) was not supplied."""

    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(
            f"{collection.capitalize()} data not found. Send {collection} in the "
            f"request or configure the data store."
        )
