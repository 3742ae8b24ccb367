import enum

__all__ = ["Role", "ASSIGNABLE_ROLES", "can_manage", "is_staff"]


class Role(str, enum.Enum):
    """Account roles, declared lowest to highest."""
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank >= other.rank


_RANKS = {role: rank for rank, role in enumerate(Role)}

# SUPER_ADMIN is only granted out of band
ASSIGNABLE_ROLES = (Role.USER, Role.MODERATOR, Role.ADMIN)


def is_staff(role: Role) -> bool:
    return Role(role) >= Role.MODERATOR


def can_manage(actor: Role, target: Role, new_role: Role = None) -> bool:
    """
    True when ``actor`` may act on an account currently holding ``target``,
    optionally moving it to ``new_role``. Both must rank strictly below the actor.
    """
    actor, target = Role(actor), Role(target)
    if target >= actor:
        return False
    if new_role is not None and Role(new_role) >= actor:
        return False
    return True
