from datetime import datetime
from typing import TypedDict, Optional, Any

from roombot.context import ActionDirective, ConversationContext


class DispatchState(TypedDict, total=False):
    # NLU response being augmented in place ({"output": {...}, "context": {...}, ...})
    response: dict[str, Any]

    # structured view of response["context"]; written back after the run
    context: ConversationContext
    action: ActionDirective

    # fixed "now" for window derivation (tests); wall clock when absent
    now: Optional[datetime]

    trace: list[dict]
