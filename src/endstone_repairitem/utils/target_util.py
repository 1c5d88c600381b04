from enum import Enum
from typing import TYPE_CHECKING, Collection, Iterable, Optional

from endstone_repairitem.utils.target_selector_util import get_matching_actors

if TYPE_CHECKING:
    from endstone import Player, Server
    from endstone.command import CommandSender


class TargetKind(Enum):
    SELF = "self"
    PLAYER = "player"
    MULTIPLE = "multiple"


class TargetError(Exception):
    """The target of a command could not be resolved; message_id is sent to the sender."""
    message_id = "repair.sender.error.player_offline"


class PlayersOnlyError(TargetError):
    message_id = "repair.sender.error.players_only"


class PlayerNotFoundError(TargetError):
    message_id = "repair.sender.error.player_offline"


class NoPlayersOnlineError(TargetError):
    message_id = "repair.sender.error.no_players_online"


def is_player(sender) -> bool:
    return sender is not None and sender.as_player() is not None


def same_player(a, b) -> bool:
    if a is b:
        return True
    a_id = getattr(a, "unique_id", None)
    return a_id is not None and a_id == getattr(b, "unique_id", None)


class Target:
    """Non-empty set of players a command applies to."""

    def __init__(self, players: Iterable["Player"], kind: TargetKind):
        players = tuple(players)
        if not players:
            raise ValueError("Target player collection cannot be empty")

        self.players = players
        self.kind = kind

    def __len__(self):
        return len(self.players)

    def __iter__(self):
        return iter(self.players)

    @property
    def is_single(self) -> bool:
        return len(self.players) == 1

    def get_one(self) -> "Player":
        return self.players[0]

    def is_only(self, sender: "CommandSender") -> bool:
        return self.is_single and same_player(self.players[0], sender)

    def replacement(self, sender: "CommandSender", self_placeholder: str, all_placeholder: str) -> str:
        """Text for the {target} placeholder of messages sent to the sender."""
        if not self.is_single:
            return all_placeholder
        if self.is_only(sender):
            return self_placeholder
        return self.get_one().name

    @classmethod
    def of(cls, player: "Player", sender: Optional["CommandSender"] = None) -> "Target":
        kind = TargetKind.SELF if sender is not None and same_player(player, sender) else TargetKind.PLAYER
        return cls((player,), kind)

    @classmethod
    def online(cls, players: Collection["Player"], sender: Optional["CommandSender"] = None) -> "Target":
        if len(players) == 1:
            return cls.of(next(iter(players)), sender)
        return cls(players, TargetKind.MULTIPLE)


def resolve_self(sender: "CommandSender") -> Target:
    if not is_player(sender):
        raise PlayersOnlyError()
    return Target((sender.as_player(),), TargetKind.SELF)


def resolve_named(server: "Server", name: str, sender: Optional["CommandSender"] = None) -> Target:
    player = server.get_player(name)
    if player is None or player.name != name:
        raise PlayerNotFoundError(name)
    return Target.of(player, sender)


def resolve_all(server: "Server", sender: Optional["CommandSender"] = None) -> Target:
    players = list(server.online_players)
    if not players:
        raise NoPlayersOnlineError()
    return Target.online(players, sender)


def resolve_selector(server: "Server", sender: "CommandSender", selector: str) -> Target:
    origin = sender.as_player() if is_player(sender) else None
    players = get_matching_actors(list(server.online_players), selector, origin)
    if not players:
        raise PlayerNotFoundError(selector)
    if len(players) == 1:
        return Target.of(players[0], sender)
    return Target(players, TargetKind.MULTIPLE)


def resolve_target(server: "Server", sender: "CommandSender", token: Optional[str], all_target: Collection[str]) -> Target:
    """Absent token targets the sender, an "all" alias every online player,
    @-selectors are evaluated like vanilla, anything else is an exact player name."""
    if token is None:
        return resolve_self(sender)
    if token.lower() in all_target:
        return resolve_all(server, sender)
    if token.startswith("@"):
        return resolve_selector(server, sender, token)
    return resolve_named(server, token, sender)
