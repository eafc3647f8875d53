from dataclasses import dataclass, field
from enum import Enum, auto


class EventType(Enum):
    """Kinds of scheduling transitions recorded in a runtime trace."""

    go_create = auto()
    go_start = auto()
    go_end = auto()
    go_stop = auto()
    go_sched = auto()
    go_preempt = auto()
    go_sleep = auto()
    go_block = auto()
    go_unblock = auto()
    go_block_send = auto()
    go_block_recv = auto()
    go_block_select = auto()
    go_block_sync = auto()
    go_block_cond = auto()
    go_block_net = auto()
    go_sys_call = auto()
    go_sys_exit = auto()
    go_sys_block = auto()
    go_waiting = auto()
    go_in_syscall = auto()


@dataclass(frozen=True)
class Frame:
    """Describes one entry of a call stack."""

    pc: int
    fn: str
    file: str
    line: int


@dataclass
class Event:
    """Describes one event of a runtime trace."""

    type: EventType
    ts: int
    g: int = 0
    stack_id: int = 0
    stack: list[Frame] = field(default_factory=list)
    # The event that terminates the interval started by this one.
    link: "Event | None" = field(default=None, repr=False, compare=False)
