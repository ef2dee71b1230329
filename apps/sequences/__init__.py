"""
Sequences App - Durable Named Counters

Hands out strictly increasing integers per named sequence (order numbers,
bill numbers). Each sequence is one Counter row, incremented atomically by
the database so concurrent callers never receive the same value.

Architecture:
- Models: Counter
- Services: SequenceGenerator
- Exceptions: SequenceServiceError, StorageUnavailable
"""
