from dataclasses import dataclass, field
from typing import List


@dataclass
class ApplyResult:
    """Structured response for SchemaApplier operations."""

    success: bool
    statements_executed: int
    duration_ms: float
    database: str
    created: List[str] = field(default_factory=list)
