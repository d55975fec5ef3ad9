"""Session DTOs shared across application layers."""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Tuple

Role = Literal["admin", "user"]
CodingTrack = Literal["webdev", "app", "ai", "game", "dsa"]

CODING_TRACKS: Dict[str, str] = {
    "webdev": "Web Development",
    "app": "Mobile App Development",
    "ai": "AI / ML",
    "game": "Game Development",
    "dsa": "Data Structures & Algorithms",
}
STUDY_YEARS: Dict[str, str] = {
    "1st": "1st Year",
    "2nd": "2nd Year",
    "3rd": "3rd Year",
    "4th": "4th Year",
    "graduate": "Graduate",
    "working": "Working Professional",
}


def parse_coding_tracks(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma-separated track value, keeping known tracks in order."""
    if not raw:
        return ()
    tracks = []
    for part in raw.split(","):
        track = part.strip()
        if track in CODING_TRACKS and track not in tracks:
            tracks.append(track)
    return tuple(tracks)


def join_coding_tracks(tracks) -> str:
    return ",".join(t for t in tracks if t in CODING_TRACKS)


def _parse_interests(raw: Any) -> Tuple[str, ...]:
    """A single string is one interest; anything else must be a list of strings."""
    if not raw:
        return ()
    if isinstance(raw, str):
        return (raw,)
    if not isinstance(raw, (list, tuple)) or not all(isinstance(item, str) for item in raw):
        raise ValueError(f"interests must be a list of strings, got {raw!r}")
    return tuple(raw)


@dataclass(frozen=True)
class UserProfile:
    bio: Optional[str] = None
    college: Optional[str] = None
    course: Optional[str] = None
    year: Optional[str] = None
    interests: Tuple[str, ...] = ()
    coding_track: Optional[str] = None
    team_id: Optional[str] = None

    @property
    def coding_tracks(self) -> Tuple[str, ...]:
        return parse_coding_tracks(self.coding_track)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "UserProfile":
        return cls(
            bio=data.get("bio"),
            college=data.get("college"),
            course=data.get("course"),
            year=data.get("year"),
            interests=_parse_interests(data.get("interests")),
            coding_track=data.get("coding_track"),
            team_id=data.get("team_id"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        for key in ("bio", "college", "course", "year", "coding_track", "team_id"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        out["interests"] = list(self.interests)
        return out


@dataclass(frozen=True)
class UserPreferences:
    notifications: Optional[bool] = None
    privacy: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in (("notifications", self.notifications), ("privacy", self.privacy)) if v is not None}


@dataclass(frozen=True)
class User:
    """Client-side mirror of the backend user record. The backend owns it."""

    id: str
    email: str
    name: str = ""
    google_id: Optional[str] = None
    picture: Optional[str] = None
    verified_email: bool = False
    created_at: Optional[str] = None
    last_login: Optional[str] = None
    login_count: int = 0
    role: Role = "user"
    profile: Optional[UserProfile] = None
    preferences: Optional[UserPreferences] = field(default=None)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "User":
        if not isinstance(data, Mapping) or not data.get("id"):
            raise ValueError("User record must be a mapping with an id")
        profile = data.get("profile")
        prefs = data.get("preferences")
        return cls(
            id=str(data["id"]),
            email=data.get("email") or "",
            name=data.get("name") or "",
            google_id=data.get("google_id"),
            picture=data.get("picture"),
            verified_email=bool(data.get("verified_email", False)),
            created_at=data.get("created_at"),
            last_login=data.get("last_login"),
            login_count=int(data.get("login_count") or 0),
            role="admin" if data.get("role") == "admin" else "user",
            profile=UserProfile.from_dict(profile) if isinstance(profile, Mapping) else None,
            preferences=UserPreferences(
                notifications=prefs.get("notifications"),
                privacy=prefs.get("privacy"),
            ) if isinstance(prefs, Mapping) else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "google_id": self.google_id,
            "email": self.email,
            "name": self.name,
            "picture": self.picture,
            "verified_email": self.verified_email,
            "created_at": self.created_at,
            "last_login": self.last_login,
            "login_count": self.login_count,
            "role": self.role,
        }
        if self.profile is not None:
            out["profile"] = self.profile.to_dict()
        if self.preferences is not None:
            out["preferences"] = self.preferences.to_dict()
        return out


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == "admin"
