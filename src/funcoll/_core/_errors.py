class ImmutabilityViolation(TypeError):
    """Raised on any attempt to write to, or delete from, an immutable wrapper."""
