from __future__ import annotations


class HueSchedulerError(Exception):
    """Base class for all scheduler errors."""


class ParseError(HueSchedulerError):
    """Malformed time-window annotation in a scene name."""


class SolarComputationError(HueSchedulerError):
    pass


class NoSolarEvent(SolarComputationError):
    """Sun never rises or never sets on the requested date (polar day/night)."""


class BridgeCommunicationError(HueSchedulerError):
    """Timeout, transport failure or malformed response from the bridge."""


class BridgeAuthError(BridgeCommunicationError):
    pass


class ConfigurationError(HueSchedulerError):
    pass
