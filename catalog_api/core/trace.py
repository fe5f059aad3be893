import uuid
from contextvars import ContextVar

_trace_id: ContextVar[str] = ContextVar("trace_id", default="-")


def get_trace_id() -> str:
    return _trace_id.get()


def set_trace_id(value: str) -> None:
    _trace_id.set(value)


def new_trace_id(incoming: str | None = None) -> str:
    """Принять trace id от вызывающего или выпустить новый."""
    value = incoming or uuid.uuid4().hex
    set_trace_id(value)
    return value
