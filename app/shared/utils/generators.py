"""Primary key generation."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """New CUID2 string, used as the primary key of tracked records and audit entries."""
    value = cuid_generator()
    if not isinstance(value, str):
        raise TypeError(f"cuid generator returned {type(value).__name__}, expected str")
    return value
