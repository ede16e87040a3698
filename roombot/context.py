from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ActionDirective:
    """
    Booking instruction the NLU service leaves in context.action, e.g.

      {"command": "confirm-reservation", "dates": "2024-06-01",
       "times": [{"value": "14:00"}, {"value": "15:00"}]}

    `raw` is kept untouched so an unhandled directive goes back to the
    NLU service exactly as it arrived.
    """
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "ActionDirective":
        return cls(raw=dict(d) if isinstance(d, dict) else {})

    @property
    def command(self) -> Optional[str]:
        return self.raw.get("command")

    @property
    def dates(self) -> Optional[str]:
        return self.raw.get("dates")

    def _time(self, idx: int) -> Optional[str]:
        times = self.raw.get("times") or []
        if len(times) <= idx:
            return None
        t = times[idx]
        if isinstance(t, dict):
            return t.get("value")
        return t

    @property
    def start_time(self) -> Optional[str]:
        return self._time(0)

    @property
    def end_time(self) -> Optional[str]:
        return self._time(1)

    def is_empty(self) -> bool:
        return not self.raw


@dataclass
class ConversationContext:
    """
    Context bag round-tripped with the NLU service every turn.

    Fields this service reads or writes are typed; everything else the
    dialog sets (conversation_id, system, ...) is carried in `extra` and
    written back verbatim.
    """
    action: ActionDirective = field(default_factory=ActionDirective)
    reservations: Optional[List[Dict[str, Any]]] = None
    remove_index: Optional[Any] = None
    timezone: Optional[str] = None
    user: Optional[Dict[str, Any]] = None
    extra: Dict[str, Any] = field(default_factory=dict)
    has_action: bool = False

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "ConversationContext":
        d = dict(d or {})
        ctx = cls()
        if "action" in d and isinstance(d["action"], dict):
            ctx.action = ActionDirective.from_dict(d.pop("action"))
            ctx.has_action = True
        if d.get("reservations") is not None:
            ctx.reservations = d.pop("reservations")
        if d.get("removeIndex") is not None:
            ctx.remove_index = d.pop("removeIndex")
        if d.get("timezone") is not None:
            ctx.timezone = d.pop("timezone")
        if d.get("user") is not None:
            ctx.user = d.pop("user")
        # unknown keys, and known keys the dialog set to null
        ctx.extra = d
        return ctx

    def to_dict(self) -> Dict[str, Any]:
        out = dict(self.extra)
        if self.has_action:
            out["action"] = dict(self.action.raw)
        if self.reservations is not None:
            out["reservations"] = self.reservations
        if self.remove_index is not None:
            out["removeIndex"] = self.remove_index
        if self.timezone is not None:
            out["timezone"] = self.timezone
        if self.user is not None:
            out["user"] = self.user
        return out

    @property
    def user_id(self) -> Optional[str]:
        if not self.user:
            return None
        return self.user.get("id")

    def clear_action(self) -> None:
        self.action = ActionDirective()
        self.has_action = True
