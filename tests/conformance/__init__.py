"""
Conformance Test Suite

Property-based checks of the chain's invariants over random call sequences
drawn from strategies.py. Organized by invariant:
1. atomicity.py - A rejected call leaves no trace
2. authorization.py - Guarded calls only succeed for the role holder
3. determinism.py - Same calls, same state; replay and clone are faithful
4. monotonicity.py - Histories and counters only grow, without gaps
"""
