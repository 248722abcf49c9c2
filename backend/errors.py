""" Error kinds raised by the ORM pipeline. main() logs them and exits with status 1. """

from typing import List, Optional


class ORMPackerError(Exception):
    pass


class ArgumentError(ORMPackerError):
    pass


class FormatError(ORMPackerError):
    pass


class DecodeError(ORMPackerError):
# Raised while loading a present file; the loader downgrades it to a warning and treats the map as absent.
    pass


class NoInputError(ORMPackerError):
    pass


class ChannelRangeError(ORMPackerError):
    pass


class DimensionMismatchError(ORMPackerError):

    def __init__(self, message: str, mismatches: Optional[List[str]] = None):
        super().__init__(message)
        self.mismatches: List[str] = list(mismatches or []) # One line per mismatched width/height/channel count.


class AllocationError(ORMPackerError):
    pass


class EncodeError(ORMPackerError):
    pass
