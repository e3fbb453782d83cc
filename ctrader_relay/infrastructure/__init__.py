"""Infrastructure layer - transports, codecs, configuration and the HTTP API."""
