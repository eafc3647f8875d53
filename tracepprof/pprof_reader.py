import gzip
import tracepprof.profile_pb2 as pb2
import tracepprof.dto as dto

_GZIP_MAGIC = b"\x1f\x8b"


def parse_profile(data):
    """Decodes a pprof profile, compressed or not, into dto objects."""
    if data[:2] == _GZIP_MAGIC:
        data = gzip.decompress(data)
    msg = pb2.Profile()
    msg.ParseFromString(data)
    strings = list(msg.string_table)

    def _str(idx):
        if idx < 0 or idx >= len(strings):
            raise ValueError(f"String index {idx} out of range")
        return strings[idx]

    def _value_type(vt):
        return dto.ValueType(type=_str(vt.type), unit=_str(vt.unit))

    functions = {}  # id -> dto.Function
    for f in msg.function:
        functions[f.id] = dto.Function(
            id=f.id,
            name=_str(f.name),
            system_name=_str(f.system_name),
            filename=_str(f.filename),
            start_line=f.start_line,
        )

    locations = {}  # id -> dto.Location
    for l in msg.location:
        lines = []
        for line in l.line:
            if line.function_id not in functions:
                raise ValueError(
                    f"Location {l.id} references unknown function {line.function_id}"
                )
            lines.append(dto.Line(function=functions[line.function_id], line=line.line))
        locations[l.id] = dto.Location(id=l.id, address=l.address, lines=lines)

    samples = []
    for s in msg.sample:
        for loc_id in s.location_id:
            if loc_id not in locations:
                raise ValueError(f"Sample references unknown location {loc_id}")
        samples.append(
            dto.Sample(
                values=list(s.value),
                locations=[locations[loc_id] for loc_id in s.location_id],
            )
        )

    return dto.Profile(
        period_type=_value_type(msg.period_type),
        period=msg.period,
        sample_types=[_value_type(t) for t in msg.sample_type],
        functions=list(functions.values()),
        locations=list(locations.values()),
        samples=samples,
    )
