class ContentDefinitionError(Exception):
    """A content type or field definition is malformed (bad kind, cyclic reference, ...)."""
