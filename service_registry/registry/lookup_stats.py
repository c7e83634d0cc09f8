from pydantic import BaseModel


class LookupStats(BaseModel):
    """Snapshot of the lookup instrumentation of a registry"""

    enabled: bool = False
    """Whether successful lookups are being timed"""

    lookup_count: int = 0
    """Number of successful lookups timed so far"""

    total_elapsed_seconds: float = 0.0
    """Total time spent in successful lookups"""
