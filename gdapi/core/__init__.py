"""Core Application Layer: the GoDaddy API client.

Connects the domain layer with the HTTP and resilience infrastructure.
"""
