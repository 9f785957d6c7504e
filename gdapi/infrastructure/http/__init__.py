"""HTTP request construction and response decoding for the GoDaddy API."""
