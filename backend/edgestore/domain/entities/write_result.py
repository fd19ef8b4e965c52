"""Outcome of a single raw write — an explicit result instead of exceptions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class WriteOk:
    key: str
    size_bytes: int


@dataclass(frozen=True)
class WriteQuotaExceeded:
    key: str
    bytes_needed: int
    error: Exception


@dataclass(frozen=True)
class WriteFailed:
    key: str
    error: Exception


WriteResult = WriteOk | WriteQuotaExceeded | WriteFailed
