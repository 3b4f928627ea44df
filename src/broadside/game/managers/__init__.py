"""Manager systems for battle flow coordination.

This package contains the manager classes that coordinate different aspects
of a battle through the event-driven architecture:
- log_manager.py: Collects LogMessage events into a filtered buffer
- energy_manager.py: Per-team energy and grog pools
- turn_manager.py: Round state machine, initiative and swaps
"""
