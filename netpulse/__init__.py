"""netpulse: live internet reachability monitor for the terminal."""

__version__ = "0.1.0"
