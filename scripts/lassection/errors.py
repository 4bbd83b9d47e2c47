from __future__ import annotations


class LasSectionError(ValueError):
    """Base class for every decoding, layout and schema error."""


class NotARecognizedFormat(LasSectionError):
    """Bad signature or truncated header. Callers skip the file."""

    def __init__(self, location: str, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"{location or '<bytes>'}: {reason}")


class UnsupportedVersion(LasSectionError):
    def __init__(self, major: int, minor: int) -> None:
        self.version = (major, minor)
        super().__init__(f"unsupported LAS version {major}.{minor}")


class UnknownPointFormat(LasSectionError):
    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"unknown point data record format {code}")


class IncompatibleFieldType(LasSectionError):
    def __init__(self, name: str, left, right) -> None:
        self.name = name
        self.left = left
        self.right = right
        super().__init__(f"failed to merge field '{name}': {left} and {right}")


class UnsupportedCast(LasSectionError):
    def __init__(self, source, target) -> None:
        self.source = source
        self.target = target
        super().__init__(f"cannot cast {source} to {target}")


class InvalidStride(LasSectionError):
    def __init__(self, stride: int, length: int) -> None:
        self.stride = stride
        self.length = length
        super().__init__(f"record stride {stride} is smaller than record length {length}")


class UnsupportedType(LasSectionError):
    def __init__(self, data_type) -> None:
        self.data_type = data_type
        super().__init__(f"unsupported type {data_type}")
