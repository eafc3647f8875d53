from dataclasses import dataclass, field
from enum import Enum
import logging
from tracepprof.trace_dto import EventType, Frame

logger = logging.getLogger(__name__)


class Analysis(Enum):
    """The pprof-like profiles that can be extracted from a trace."""

    io = "io"  # time spent in network wait
    block = "block"  # time spent blocked on synchronization primitives
    syscall = "syscall"  # time spent blocked in syscalls
    sched = "sched"  # time between becoming runnable and being scheduled

    @classmethod
    def from_name(cls, name):
        """Returns the analysis with the given name."""
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"Unknown analysis {name!r}") from None

    def matches(self, event_type):
        """Check if events of `event_type` contribute to this analysis."""
        return event_type in _EVENT_TYPES[self]


_EVENT_TYPES = {
    Analysis.io: frozenset([EventType.go_block_net]),
    Analysis.block: frozenset(
        [
            EventType.go_block_send,
            EventType.go_block_recv,
            EventType.go_block_select,
            EventType.go_block_sync,
            EventType.go_block_cond,
        ]
    ),
    Analysis.syscall: frozenset([EventType.go_sys_call]),
    Analysis.sched: frozenset([EventType.go_unblock, EventType.go_create]),
}


@dataclass
class Record:
    """Accumulates the intervals recorded under one stack."""

    stack: list[Frame] = field(default_factory=list)
    count: int = 0
    time: int = 0

    def merge(self, count, time):
        """Adds `count` intervals summing up to `time` nanoseconds."""
        self.count += count
        self.time += time

    def combine(self, other):
        """Merges a record for the same stack, aggregated separately."""
        if not self.stack:
            self.stack = other.stack
        self.merge(other.count, other.time)


def aggregate(events, analysis):
    """Groups the events relevant to `analysis` by stack id.

    Only events that have a link and a non-empty stack are counted; the
    duration of each is the distance to its link, which may be negative.
    """
    records = {}  # stack_id -> Record
    num_negative = 0
    for ev in events:
        if not analysis.matches(ev.type):
            continue
        if ev.link is None or ev.stack_id == 0 or not ev.stack:
            continue

        rec = records.get(ev.stack_id)
        if rec is None:
            rec = records[ev.stack_id] = Record(stack=ev.stack)
        elapsed = ev.link.ts - ev.ts
        if elapsed < 0:
            num_negative += 1
        rec.merge(1, elapsed)

    if num_negative:
        logger.warning(
            f"{analysis.value}: {num_negative} events end before they start"
        )
    logger.debug(f"{analysis.value}: aggregated {len(records)} stacks")
    return records


def merge_aggregates(*aggregates):
    """Merges the results of aggregating separate parts of a trace."""
    res = {}
    for records in aggregates:
        for stack_id, rec in records.items():
            if stack_id in res:
                res[stack_id].combine(rec)
            else:
                res[stack_id] = Record(rec.stack, rec.count, rec.time)
    return res
