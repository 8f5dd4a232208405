"""Services Layer — imperative shell around the pure core.

Invariants:
    - Services own all store IO; core decides, services execute
    - Each mutation is one store call; no in-process locks or shared state

Design Decisions:
    - One module per concern (gate, reveal, self-destruct, lifecycle, notifications)
"""
