class VenuePlannerError(Exception):
    """Base class for errors raised by the venue planner."""


class ParseError(VenuePlannerError):
    """The workbook or sheet could not be turned into a venue map."""
