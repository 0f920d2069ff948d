"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~jsonfetch.exceptions.JsonfetchError` subclass.
Shell scripts wrapping ``jsonfetch`` can inspect the exit code to tell a
network failure from a bad credential without parsing stderr.

Example::

    $ jsonfetch request https://api.example.com /users
    $ echo $?
    6   # EXIT_TRANSPORT_ERROR -- the request never produced a response
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""Authentication settings were incomplete or invalid."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused, empty response)."""

EXIT_UPLOAD_ERROR = 8
"""A file selected for upload could not be read."""

EXIT_DECODE_ERROR = 9
"""The response body was not valid JSON and strict decoding was requested."""
