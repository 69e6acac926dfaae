from enum import Enum


class MusicIdentity(str, Enum):
    casual_listener = "casual_listener"
    vinyl_collector = "vinyl_collector"
    vinyl_dj = "vinyl_dj"
    live_music_lover = "live_music_lover"
    music_explorer = "music_explorer"


class Genre(str, Enum):
    house = "house"
    techno = "techno"
    jazz = "jazz"
    soul_funk = "soul_funk"
    hiphop = "hiphop"
    rnb = "rnb"
    afrobeat = "afrobeat"
    latin = "latin"
    rock = "rock"
    electronic = "electronic"


class EventIntent(str, Enum):
    discovering_music = "discovering_music"
    meeting_people = "meeting_people"
    dancing = "dancing"
    chilling = "chilling"
    supporting_artists = "supporting_artists"


IDENTITY_LABELS = {
    MusicIdentity.casual_listener: "🎧 Casual Listener",
    MusicIdentity.vinyl_collector: "💿 Vinyl Collector",
    MusicIdentity.vinyl_dj: "🎚️ Vinyl DJ",
    MusicIdentity.live_music_lover: "🎤 Live-Music Lover",
    MusicIdentity.music_explorer: "🔍 Music Explorer",
}

GENRE_LABELS = {
    Genre.house: "House",
    Genre.techno: "Techno",
    Genre.jazz: "Jazz",
    Genre.soul_funk: "Soul/Funk",
    Genre.hiphop: "Hip-Hop",
    Genre.rnb: "R&B",
    Genre.afrobeat: "Afrobeat",
    Genre.latin: "Latin",
    Genre.rock: "Rock",
    Genre.electronic: "Electronic",
}

INTENT_LABELS = {
    EventIntent.discovering_music: "Discovering new music",
    EventIntent.meeting_people: "Meeting people",
    EventIntent.dancing: "Dancing",
    EventIntent.chilling: "Chilling & vibing",
    EventIntent.supporting_artists: "Supporting artists",
}


def _label(labels: dict, value: str) -> str:
    # unknown values are shown as stored
    return labels.get(value, value)


def generate_vibe_card(user) -> str:
    """One-line summary of a user's music profile, e.g.
    "💿 Vinyl Collector · House, Jazz · Meeting people".
    """
    if user is None:
        return ""
    parts = []
    if user.music_identity:
        parts.append(_label(IDENTITY_LABELS, user.music_identity))
    if user.top_genres:
        parts.append(", ".join(_label(GENRE_LABELS, genre) for genre in user.top_genres))
    if user.event_intent:
        parts.append(_label(INTENT_LABELS, user.event_intent))
    return " · ".join(parts)
