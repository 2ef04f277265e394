"""
Application layer - hotel inventory access.

Use cases and the ports (interfaces) infrastructure implements.

Structure:
- use_cases/: prebook validation, booking selection, cancellation
- interfaces/: ports for adapters, repositories and gateways
"""
