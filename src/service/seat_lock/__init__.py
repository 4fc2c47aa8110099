"""
Seat Lock Service

Lease-based seat locking for concurrent booking clients
Responsibilities:
- Seat lock / confirm / release state machine
- Lazy reclamation of expired locks
- Pushing seat state changes to observers
"""
