from .auth_commands import register_auth_commands
from .challenge_commands import register_challenge_commands

__all__ = [
    "register_auth_commands",
    "register_challenge_commands",
]
