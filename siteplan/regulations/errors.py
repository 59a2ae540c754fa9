"""Domain input errors raised at the regulation boundary."""


class RegulationInputError(ValueError):
    """Caller supplied a parcel that cannot enter the regulation engine."""


class InvalidZoneType(RegulationInputError):
    """Zone type is not present in the zone regulation table."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Unknown zone type: {value!r}")


class InvalidParcelArea(RegulationInputError):
    """Parcel area is zero, negative or not a finite number."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Parcel area must be a positive finite number, got {value!r}")
