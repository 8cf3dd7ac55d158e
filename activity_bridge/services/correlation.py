"""
Identifier utilities
"""
import uuid


def generate_guid() -> str:
    """Generate a unique identifier for choices, hints, responses and attempts"""
    return str(uuid.uuid4())


def generate_correlation_id() -> str:
    """Generate a correlation ID linking a bridge event to its telemetry"""
    return uuid.uuid4().hex
