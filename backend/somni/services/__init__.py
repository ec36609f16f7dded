"""Services Layer — async orchestration of repository IO around core/ rules.

Invariants:
    - Services depend on core/ Protocols only, never on concrete stores
"""
