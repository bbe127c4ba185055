"""Exception hierarchy shared by the fishbone modules."""


class FishboneError(Exception):
    """Base class for every error raised by fishbone."""


class ValidationError(FishboneError, ValueError):
    """The input cause tree or the graph built from it is malformed."""


class ConfigurationError(FishboneError, ValueError):
    """Style tables or layout settings violate their preconditions."""


class SimulationError(FishboneError, RuntimeError):
    """The layout simulation produced unusable geometry and was stopped."""
