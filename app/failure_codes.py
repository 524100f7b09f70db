"""Shared failure code constants for dashboard load handling."""

# Either one leaves every result set empty.
LOAD_FAILURE = "load_failure"
PARSE_FAILURE = "parse_failure"
