"""gdapi: rate-limited, retrying client for the GoDaddy REST API."""

__version__ = "0.1.0"
