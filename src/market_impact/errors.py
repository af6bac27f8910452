"""Errors raised while parsing untrusted analysis payloads."""


class MalformedInputError(ValueError):
    """Analysis payload does not match the ImpactAnalysis schema."""


class OutOfRangeValueError(MalformedInputError):
    """A score lies outside [0, 1] or an enum value is outside its closed set."""
