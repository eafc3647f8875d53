from dataclasses import dataclass, field


@dataclass
class ValueType:
    """Describes the type and unit of a value."""

    type: str
    unit: str


@dataclass
class Function:
    """Describes a function in the source code."""

    id: int
    name: str
    system_name: str
    filename: str
    start_line: int = 0


@dataclass
class Line:
    """Describes a source line inside a function."""

    function: Function
    line: int


@dataclass
class Location:
    """Describes an address in the program, bound to its source lines."""

    id: int
    address: int
    lines: list[Line] = field(default_factory=list)


@dataclass
class Sample:
    """Describes a weighted call stack; the innermost location comes first."""

    values: list[int]
    locations: list[Location] = field(default_factory=list)


@dataclass
class Profile:
    """Describes a pprof-like profile."""

    period_type: ValueType
    period: int
    sample_types: list[ValueType] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    locations: list[Location] = field(default_factory=list)
    samples: list[Sample] = field(default_factory=list)

    def check_valid(self):
        """Raises ValueError if the profile is not internally consistent."""
        functions = _check_ids(self.functions, "function")
        locations = _check_ids(self.locations, "location")

        for loc in self.locations:
            for line in loc.lines:
                if functions.get(line.function.id) is not line.function:
                    raise ValueError(
                        f"Location {loc.id} references unknown function {line.function.id}"
                    )

        for sample in self.samples:
            if len(sample.values) != len(self.sample_types):
                raise ValueError(
                    f"Sample has {len(sample.values)} values, "
                    f"expected {len(self.sample_types)}"
                )
            for loc in sample.locations:
                if locations.get(loc.id) is not loc:
                    raise ValueError(f"Sample references unknown location {loc.id}")


def _check_ids(items, what):
    by_id = {}
    for item in items:
        if item.id == 0:
            raise ValueError(f"Found {what} with reserved id 0")
        if item.id in by_id:
            raise ValueError(f"Found duplicate {what} id {item.id}")
        by_id[item.id] = item
    return by_id
