import gzip
import logging
import tracepprof.profile_pb2 as pb2
import tracepprof.dto as dto

logger = logging.getLogger(__name__)


class PprofWriter:
    """Knows how to write a pprof profile file."""

    def __init__(self):
        self._profile = pb2.Profile()
        self._strings = {}  # string -> index in the string table
        self._string_id("")

    def serialize(self):
        """Returns the gzip-compressed encoding of the profile."""
        return gzip.compress(self._profile.SerializeToString(), mtime=0)

    def write(self, filename):
        """Writes the profile to a file."""
        data = self.serialize()
        with open(filename, "wb") as f:
            f.write(data)
        logger.debug(f"Wrote {len(data)} bytes to {filename}")

    def add(self, item):
        """Add a profile dto object to the profile."""
        if isinstance(item, dto.Profile):
            self.add_profile(item)
        elif isinstance(item, dto.Function):
            self.add_function(item)
        elif isinstance(item, dto.Location):
            self.add_location(item)
        elif isinstance(item, dto.Sample):
            self.add_sample(item)
        else:
            raise ValueError(f"Unknown object {item}")

    def add_profile(self, p: dto.Profile):
        """Adds the header and all the entries of a profile."""
        p.check_valid()
        for t in p.sample_types:
            self._set_value_type(self._profile.sample_type.add(), t)
        self._set_value_type(self._profile.period_type, p.period_type)
        self._profile.period = p.period
        for fn in p.functions:
            self.add_function(fn)
        for loc in p.locations:
            self.add_location(loc)
        for sample in p.samples:
            self.add_sample(sample)

    def add_function(self, f: dto.Function):
        """Adds a function to the profile."""
        function = self._profile.function.add()
        function.id = f.id
        function.name = self._string_id(f.name)
        function.system_name = self._string_id(f.system_name)
        function.filename = self._string_id(f.filename)
        function.start_line = f.start_line

    def add_location(self, l: dto.Location):
        """Adds a location to the profile."""
        location = self._profile.location.add()
        location.id = l.id
        location.address = l.address
        for line in l.lines:
            entry = location.line.add()
            entry.function_id = line.function.id
            entry.line = line.line

    def add_sample(self, s: dto.Sample):
        """Adds a sample to the profile."""
        sample = self._profile.sample.add()
        sample.location_id.extend(loc.id for loc in s.locations)
        sample.value.extend(s.values)

    def _set_value_type(self, msg, t: dto.ValueType):
        msg.type = self._string_id(t.type)
        msg.unit = self._string_id(t.unit)

    def _string_id(self, s):
        """Interns `s` in the string table and returns its index."""
        idx = self._strings.get(s)
        if idx is None:
            idx = len(self._profile.string_table)
            self._profile.string_table.append(s)
            self._strings[s] = idx
        return idx


def profile_bytes(profile):
    """Returns the serialized form of `profile`."""
    writer = PprofWriter()
    writer.add(profile)
    return writer.serialize()
