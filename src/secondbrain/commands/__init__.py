"""Vault lifecycle commands: init, update, remove, member and completion."""

from secondbrain.commands.completion import SUPPORTED_SHELLS, completion
from secondbrain.commands.init import InitReport, init
from secondbrain.commands.member import MemberReport, member
from secondbrain.commands.remove import RemoveReport, remove
from secondbrain.commands.update import UpdateReport, update

__all__ = [
    "InitReport",
    "MemberReport",
    "RemoveReport",
    "SUPPORTED_SHELLS",
    "UpdateReport",
    "completion",
    "init",
    "member",
    "remove",
    "update",
]
