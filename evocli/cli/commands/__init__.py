"""
CLI Commands.

Organized by API resource.
"""

from evocli.cli.commands.command import app as command_app
from evocli.cli.commands.instance import app as instance_app
from evocli.cli.commands.plan import app as plan_app
from evocli.cli.commands.user import app as user_app

__all__ = [
    "command_app",
    "instance_app",
    "plan_app",
    "user_app",
]
