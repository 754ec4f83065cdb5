"""Exception types raised by capattern.

All errors derive from :class:`PatternFilterError` so callers can catch the
whole family at once. Configuration problems additionally subclass
``ValueError`` to match how parameter validation is reported elsewhere.
"""


class PatternFilterError(Exception):
    """Base class for all pattern filtering errors."""


class ConfigurationError(PatternFilterError, ValueError):
    """Invalid parameters or input shapes."""


class InsufficientReferenceEvents(PatternFilterError):
    """No usable reference events are left to build a pattern template."""

    def __init__(self, n_detected: int, n_usable: int = 0):
        self.n_detected = n_detected
        self.n_usable = n_usable
        super().__init__(
            f"Reference signal yielded {n_usable} usable events "
            f"({n_detected} detected, first one discarded); "
            "cannot build a pattern template."
        )


class PeakOutOfRange(PatternFilterError):
    """A reference event window reads outside the signal bounds."""

    def __init__(self, index: int, pattern_len: int, signal_len: int):
        self.index = index
        self.pattern_len = pattern_len
        self.signal_len = signal_len
        super().__init__(
            f"Reference peak at index {index} with pattern_len={pattern_len} "
            f"needs samples [{index - pattern_len}, {index + pattern_len}], "
            f"outside a signal of length {signal_len}."
        )


class DetectorContractError(PatternFilterError):
    """The event detector returned output that is not a valid PeakSet."""
