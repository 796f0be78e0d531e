"""State layer.

Holds the process-lifetime latest reading per node and derives node and
gateway presence from it.
"""
