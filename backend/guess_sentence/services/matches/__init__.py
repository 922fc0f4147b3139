"""Match domain services: letter pricing, reveal masks, lifecycle and views.

This package holds the game rules. HTTP routes and socket handlers call
into it with an explicit actor and never touch match rows directly.
"""
