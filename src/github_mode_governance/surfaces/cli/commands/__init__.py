from .policy import register_policy_commands
from .scoreboard import register_scoreboard_commands

__all__ = [
    "register_policy_commands",
    "register_scoreboard_commands",
]
