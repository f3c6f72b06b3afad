"""Repository-related data models."""

from dataclasses import dataclass, field

from bitbucket_enforcer.exceptions import ValidationError


@dataclass(frozen=True)
class RepositoryRef:
    """Owner and slug of a repository."""

    owner: str
    slug: str

    @classmethod
    def parse(cls, full_name: str) -> "RepositoryRef":
        """
        Split a fully-qualified ``owner/slug`` name.

        Raises:
            ValidationError: If the name has no owner or no slug
        """
        owner, sep, slug = full_name.partition("/")
        if not sep or not owner or not slug:
            raise ValidationError(
                "INVALID_REPOSITORY_NAME",
                f"Repository name '{full_name}' is not of the form owner/slug",
            )
        return cls(owner=owner, slug=slug)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.slug}"

    def __str__(self) -> str:
        return self.full_name


@dataclass
class Repository:
    """Repository as listed in an account's roster."""

    full_name: str
    description: str = ""

    @property
    def ref(self) -> RepositoryRef:
        return RepositoryRef.parse(self.full_name)


@dataclass
class RepositorySettings:
    """Current values of the scalar repository settings."""

    is_private: bool | None = None
    no_forks: bool | None = None
    no_public_forks: bool | None = None
    has_issues: bool | None = None
    landing_page: str | None = None
    main_branch: str | None = None

    @property
    def forks(self) -> str | None:
        """Fork policy as "none", "private" or "public" (None if unknown)."""
        if self.no_forks is None or self.no_public_forks is None:
            return None
        if self.no_forks:
            return "none"
        if self.no_public_forks:
            return "private"
        return "public"

    @property
    def issue_tracker(self) -> str | None:
        """Issue tracker as "none" or "public" (None if unknown)."""
        if self.has_issues is None:
            return None
        return "public" if self.has_issues else "none"


@dataclass
class RemoteDeployKey:
    """A deploy key as reported by the remote."""

    id: int
    key: str
    label: str


@dataclass
class Service:
    """A service hook attached to a repository."""

    id: int
    type: str
    fields: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BranchRestriction:
    """A branch restriction rule."""

    kind: str  # "delete", "force" or "push"
    pattern: str
    users: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    id: int | None = field(default=None, compare=False)

    def same_rule(self, other: "BranchRestriction") -> bool:
        """True if both restrict the same pattern the same way, ignoring order."""
        return (
            self.kind == other.kind
            and self.pattern == other.pattern
            and sorted(self.users) == sorted(other.users)
            and sorted(self.groups) == sorted(other.groups)
        )


@dataclass
class Privilege:
    """A user or group permission on a repository."""

    name: str
    permission: str  # "read", "write", "admin"
