"""Request-scoped context passed through HTTP host adapters."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class RequestContext:
    """Mutable context shared by every unit handling one request.

    ``request`` is the framework's request object. The continuation stores
    the downstream response in ``response``; a unit may also set it directly
    to answer without calling the continuation. ``state`` is free-form
    scratch space for units.
    """

    request: Any = None
    response: Optional[Any] = None
    state: Dict[str, Any] = field(default_factory=dict)
