"""Infrastructure — database, clock, notifications, and logging adapters.

Invariants:
    - Implements core/ Protocols; core never imports from here
"""
