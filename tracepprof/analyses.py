import logging
from tracepprof.aggregate import Analysis, aggregate
from tracepprof.build_profile import build_profile
from tracepprof.pprof_writer import profile_bytes

logger = logging.getLogger(__name__)


def pprof_io(events):
    """Generates the IO profile (time spent in network wait)."""
    return pprof(events, Analysis.io)


def pprof_block(events):
    """Generates the blocking profile (time spent blocked on synchronization primitives)."""
    return pprof(events, Analysis.block)


def pprof_syscall(events):
    """Generates the syscall profile (time spent blocked in syscalls)."""
    return pprof(events, Analysis.syscall)


def pprof_sched(events):
    """Generates the scheduler latency profile.

    Measures the time between a goroutine becoming runnable and actually
    being scheduled for execution.
    """
    return pprof(events, Analysis.sched)


def pprof(events, analysis):
    """Generates the profile for `analysis`, given as an Analysis or its name."""
    if not isinstance(analysis, Analysis):
        analysis = Analysis.from_name(analysis)
    logger.debug(f"Generating {analysis.value} profile")
    return build_profile(aggregate(events, analysis))


def pprof_bytes(events, analysis):
    """Generates the profile for `analysis` and serializes it."""
    return profile_bytes(pprof(events, analysis))


ANALYSES = {
    Analysis.io.value: pprof_io,
    Analysis.block.value: pprof_block,
    Analysis.syscall.value: pprof_syscall,
    Analysis.sched.value: pprof_sched,
}
