"""Core Layer — pure domain rules, types and errors.

Invariants:
    - Core never imports from infrastructure/, services/ or api/
    - Functions here do no IO; the shell (services) applies their decisions
"""
