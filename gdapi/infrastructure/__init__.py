"""Infrastructure Layer: Contains concrete implementations and adapters.

Connects the client to the outside world (HTTP, configuration files,
logging, terminal output) using the contracts defined in the domain layer.
"""
