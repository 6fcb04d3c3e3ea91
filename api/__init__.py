"""Development implementation of the events REST API."""
