"""memkeep — categorized, tagged memories for agents, stored as flat text files."""

__version__ = "0.1.0"
