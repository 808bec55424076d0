from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ResponsePlan:
    text: str
    quick_replies: tuple[str, ...] = field(default_factory=tuple)
    variables: dict[str, Any] = field(default_factory=dict)
