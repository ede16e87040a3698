import logging
from typing import Any, Dict, Optional
from datetime import datetime

import requests
from langgraph.graph import StateGraph, END

from roombot.config import ATTENDEES, PURPOSE, ROOM_ID, SITE_ID
from roombot.context import ConversationContext
from roombot.graph.state import DispatchState
from roombot.graph.window import IncompleteActionError, listing_window, slot_window
from roombot.providers.base import BookingProvider
from roombot.utils.timefmt import format_reservation, to_epoch_ms

logger = logging.getLogger(__name__)

ROOM_AVAILABLE = "{roomid} is available. Would you confirm this reservation?"
ROOM_BUSY = "Rooms are not available at the requested time. Please try again."
RESERVATION_FAILED = "Your reservation is not successful. Please try again."
RESERVATION_NOT_FOUND = "Your reservation is not found."
CANCELLATION_PROMPT = "Please tell me the number of the reservation you want to cancel."
REQUEST_FAILED = "Your request is not successful. Please try again."

# command -> graph node
COMMANDS = {
    "check-availability": "check_availability",
    "confirm-reservation": "confirm_reservation",
    "check-reservation": "check_reservation",
    "check-next-reservation": "check_reservation",
    "check-reservation-for-cancellation": "check_reservation",
    "confirm-cancellation": "confirm_cancellation",
}


# ---------------------------
# Utilities
# ---------------------------
def add_trace(state: DispatchState, node: str, detail: dict):
    state.setdefault("trace", [])
    state["trace"].append({"node": node, "detail": detail})


def _set_text(state: DispatchState, text: Any):
    state["response"].setdefault("output", {})
    state["response"]["output"]["text"] = text


def _get_text(state: DispatchState) -> Any:
    return (state["response"].get("output") or {}).get("text")


def _require_user_id(state: DispatchState) -> str:
    user_id = state["context"].user_id
    if not user_id:
        raise IncompleteActionError(state["action"].command, "context.user.id")
    return user_id


class ActionDispatcher:
    """
    Runs the booking operation named by context.action against the booking
    API and folds the result back into the NLU response.

    Handlers augment the response in place. Every handled command leaves
    context.action == {} so an echoed context cannot fire it twice; an
    unsupported command leaves the response untouched. Refused bookings and
    cancellations become chat text, transport errors propagate.
    """

    def __init__(self, booking: BookingProvider, roomid: str = ROOM_ID, siteid: str = SITE_ID):
        self.booking = booking
        self.roomid = roomid
        self.siteid = siteid
        self.graph = self.build_graph()

    # ---------------------------
    # Routing
    # ---------------------------
    def node_route(self, state: DispatchState) -> DispatchState:
        command = state["action"].command
        logger.info("Action : %s", command)
        if command not in COMMANDS:
            logger.info("Command not supported: %s", command)
        add_trace(state, "route", {"command": command})
        return state

    @staticmethod
    def route_command(state: DispatchState) -> str:
        return COMMANDS.get(state["action"].command, "unsupported")

    @staticmethod
    def route_listing(state: DispatchState) -> str:
        command = state["action"].command
        if command == "check-next-reservation":
            return "collapse_next"
        if command == "check-reservation-for-cancellation":
            return "prompt_cancellation"
        return "finish"

    # ---------------------------
    # Handlers
    # ---------------------------
    def node_check_availability(self, state: DispatchState) -> DispatchState:
        start, end = slot_window(state["action"], state.get("now"))
        busy = self.booking.get_freebusy(self.roomid, to_epoch_ms(start), to_epoch_ms(end))

        if busy:
            _set_text(state, ROOM_BUSY)
        else:
            _set_text(state, ROOM_AVAILABLE.format(roomid=self.roomid))
        add_trace(state, "check_availability", {"start": start.isoformat(), "end": end.isoformat(), "busy": len(busy)})
        return state

    def node_confirm_reservation(self, state: DispatchState) -> DispatchState:
        start, end = slot_window(state["action"], state.get("now"))
        user_id = _require_user_id(state)

        try:
            ok = self.booking.create_booking(
                self.roomid,
                to_epoch_ms(start),
                to_epoch_ms(end),
                PURPOSE,
                ATTENDEES,
                user_id,
            )
        except requests.RequestException as e:
            logger.warning("Booking request failed: %s", e)
            ok = False

        if not ok:
            _set_text(state, RESERVATION_FAILED)
        add_trace(state, "confirm_reservation", {"start": start.isoformat(), "end": end.isoformat(), "ok": ok})
        return state

    def node_check_reservation(self, state: DispatchState) -> DispatchState:
        start, end = listing_window(state["action"], state.get("now"))
        user_id = _require_user_id(state)

        resvs = self.booking.search_by_user(self.siteid, user_id, to_epoch_ms(start), to_epoch_ms(end))
        if resvs:
            state["context"].reservations = resvs
            _set_text(state, [f"{i}: {format_reservation(r)}" for i, r in enumerate(resvs, start=1)])
        else:
            _set_text(state, [RESERVATION_NOT_FOUND])
        add_trace(state, "check_reservation", {"start": start.isoformat(), "end": end.isoformat(), "found": len(resvs)})
        return state

    def node_collapse_next(self, state: DispatchState) -> DispatchState:
        text = _get_text(state)
        if isinstance(text, list) and text:
            _set_text(state, text[0])
        return state

    def node_prompt_cancellation(self, state: DispatchState) -> DispatchState:
        text = _get_text(state)
        if isinstance(text, list):
            text.insert(0, CANCELLATION_PROMPT)
        return state

    def node_confirm_cancellation(self, state: DispatchState) -> DispatchState:
        ctx = state["context"]
        user_id = _require_user_id(state)

        resv = self._pick_reservation(ctx)
        if resv is None:
            logger.warning("No cached reservation at removeIndex=%r", ctx.remove_index)
            _set_text(state, REQUEST_FAILED)
            add_trace(state, "confirm_cancellation", {"index": ctx.remove_index, "ok": False})
            return state

        ok = self.booking.cancel_booking(resv.get("id"), user_id, resv.get("roomid"))
        if not ok:
            _set_text(state, REQUEST_FAILED)
        add_trace(state, "confirm_cancellation", {"index": ctx.remove_index, "eventid": resv.get("id"), "ok": ok})
        return state

    @staticmethod
    def _pick_reservation(ctx: ConversationContext) -> Optional[Dict[str, Any]]:
        resvs = ctx.reservations or []
        try:
            idx = int(ctx.remove_index)
        except (TypeError, ValueError):
            return None
        if idx < 0 or idx >= len(resvs):
            return None
        return resvs[idx]

    def node_finish(self, state: DispatchState) -> DispatchState:
        state["context"].clear_action()
        return state

    # ---------------------------
    # Build graph
    # ---------------------------
    def build_graph(self):
        g = StateGraph(DispatchState)

        g.add_node("route", self.node_route)
        g.add_node("check_availability", self.node_check_availability)
        g.add_node("confirm_reservation", self.node_confirm_reservation)
        g.add_node("check_reservation", self.node_check_reservation)
        g.add_node("collapse_next", self.node_collapse_next)
        g.add_node("prompt_cancellation", self.node_prompt_cancellation)
        g.add_node("confirm_cancellation", self.node_confirm_cancellation)
        g.add_node("finish", self.node_finish)

        g.set_entry_point("route")

        g.add_conditional_edges("route", self.route_command, {
            "check_availability": "check_availability",
            "confirm_reservation": "confirm_reservation",
            "check_reservation": "check_reservation",
            "confirm_cancellation": "confirm_cancellation",
            "unsupported": END,
        })
        g.add_conditional_edges("check_reservation", self.route_listing, {
            "collapse_next": "collapse_next",
            "prompt_cancellation": "prompt_cancellation",
            "finish": "finish",
        })

        g.add_edge("check_availability", "finish")
        g.add_edge("confirm_reservation", "finish")
        g.add_edge("collapse_next", "finish")
        g.add_edge("prompt_cancellation", "finish")
        g.add_edge("confirm_cancellation", "finish")
        g.add_edge("finish", END)

        return g.compile()

    def dispatch(self, response: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, Any]:
        ctx = ConversationContext.from_dict(response.get("context"))
        if ctx.action.is_empty():
            return response

        out = self.graph.invoke({
            "response": response,
            "context": ctx,
            "action": ctx.action,
            "now": now,
            "trace": [],
        })
        logger.debug("Dispatch trace: %s", out.get("trace"))
        if out["action"].command not in COMMANDS:
            return response

        context = response["context"]
        context.clear()
        context.update(out["context"].to_dict())
        return response
