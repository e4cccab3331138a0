"""Business logic services for docpipe."""
