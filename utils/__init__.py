"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, today_utc
from utils.request_context import (
    RequestContext,
    get_current_context,
    set_current_context,
    clear_current_context,
    request_context,
)
