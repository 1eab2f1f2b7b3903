"""Internal modules for simple-http.

These are implementation details shared by the dispatcher and the codec.
They are not part of the public API.

Modules:
    http - Shared HTTP client configuration
    log - Logger setup for the simple_http namespace
"""
