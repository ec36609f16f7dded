"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic; "now" is always passed in

Design Decisions:
    - Functional core separated from imperative shell: services/ read the
      repository, hand snapshots to core/, and write the results back
"""
