import logging
import tracepprof.dto as dto

logger = logging.getLogger(__name__)

PERIOD_TYPE = ("trace", "count")
PERIOD = 1
SAMPLE_TYPES = [("contentions", "count"), ("delay", "nanoseconds")]


def build_profile(records):
    """Builds a profile with one sample for each aggregated record."""
    profile = dto.Profile(
        period_type=dto.ValueType(*PERIOD_TYPE),
        period=PERIOD,
        sample_types=[dto.ValueType(t, u) for t, u in SAMPLE_TYPES],
    )
    index = _ProfileIndex(profile)
    for rec in records.values():
        locations = [index.location(frame) for frame in rec.stack]
        profile.samples.append(
            dto.Sample(values=[rec.count, rec.time], locations=locations)
        )

    logger.debug(
        f"Built profile with {len(profile.samples)} samples, "
        f"{len(profile.locations)} locations, {len(profile.functions)} functions"
    )
    return profile


class _ProfileIndex:
    """Deduplicates the functions and locations added to a profile."""

    def __init__(self, profile):
        self._profile = profile
        self._functions = {}  # (file, name) -> dto.Function
        self._locations = {}  # pc -> dto.Location

    def location(self, frame):
        """Returns the location for `frame`, adding it to the profile if new."""
        loc = self._locations.get(frame.pc)
        if loc is None:
            loc = dto.Location(
                id=len(self._profile.locations) + 1,
                address=frame.pc,
                lines=[dto.Line(function=self.function(frame), line=frame.line)],
            )
            self._profile.locations.append(loc)
            self._locations[frame.pc] = loc
        return loc

    def function(self, frame):
        """Returns the function for `frame`, adding it to the profile if new."""
        key = (frame.file, frame.fn)
        fn = self._functions.get(key)
        if fn is None:
            fn = dto.Function(
                id=len(self._profile.functions) + 1,
                name=frame.fn,
                system_name=frame.fn,
                filename=frame.file,
            )
            self._profile.functions.append(fn)
            self._functions[key] = fn
        return fn
