class ValidationError(Exception):
    pass


class DuplicateIdError(ValidationError):
    """Raised when an entity id is registered twice within one kind."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} '{entity_id}' already exists")


class UnknownReferenceError(ValidationError):
    """Raised when a lookup names an entity the network does not contain."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} '{entity_id}' does not exist")
