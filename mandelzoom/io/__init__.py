"""Configuration and request/response codecs."""
