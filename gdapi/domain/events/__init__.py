"""Domain Event definitions.

Represents significant occurrences during an API call (deferral, retry,
success, failure) that other parts of the system might react to.
"""
