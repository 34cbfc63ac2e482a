"""Read-only lookup tables shared by every extraction component.

All tables are built once at import time from tuples and exposed as
``frozenset``/``MappingProxyType`` objects so they can be shared between
threads without copying.
"""
from __future__ import annotations

import re
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

# --- Roles ---

# (phrase, canonical title, department)
_ROLE_TABLE: Tuple[Tuple[str, str, str], ...] = (
    # Above the line
    ("executive producer", "Executive Producer", "Above the Line"),
    ("line producer", "Line Producer", "Above the Line"),
    ("associate producer", "Associate Producer", "Above the Line"),
    ("co-producer", "Co-Producer", "Above the Line"),
    ("creative director", "Creative Director", "Above the Line"),
    ("showrunner", "Showrunner", "Above the Line"),
    ("producer", "Producer", "Above the Line"),
    ("director", "Director", "Above the Line"),
    ("writer", "Writer", "Above the Line"),
    ("art buyer", "Art Buyer", "Client"),
    ("brand manager", "Brand Manager", "Client"),
    ("account manager", "Account Manager", "Client"),
    # Camera
    ("director of photography", "Director of Photography", "Camera"),
    ("cinematographer", "Cinematographer", "Camera"),
    ("camera operator", "Camera Operator", "Camera"),
    ("camera assistant", "Camera Assistant", "Camera"),
    ("assistant camera", "Assistant Camera", "Camera"),
    ("steadicam operator", "Steadicam Operator", "Camera"),
    ("drone operator", "Drone Operator", "Camera"),
    ("photo assistant", "Photo Assistant", "Camera"),
    ("photography assistant", "Photo Assistant", "Camera"),
    ("photographer", "Photographer", "Camera"),
    ("videographer", "Videographer", "Camera"),
    ("digital technician", "Digital Technician", "Camera"),
    ("digital tech", "Digital Technician", "Camera"),
    ("digi tech", "Digital Technician", "Camera"),
    ("digitech", "Digital Technician", "Camera"),
    ("dit", "Digital Technician", "Camera"),
    ("dop", "Director of Photography", "Camera"),
    ("dp", "Director of Photography", "Camera"),
    ("ac", "Camera Assistant", "Camera"),
    # Sound
    ("sound mixer", "Sound Mixer", "Sound"),
    ("boom operator", "Boom Operator", "Sound"),
    ("sound designer", "Sound Designer", "Sound"),
    ("sound engineer", "Sound Engineer", "Sound"),
    ("audio engineer", "Audio Engineer", "Sound"),
    ("audio tech", "Audio Technician", "Sound"),
    ("music supervisor", "Music Supervisor", "Sound"),
    ("composer", "Composer", "Sound"),
    # Lighting and grip
    ("best boy electric", "Best Boy Electric", "Lighting"),
    ("best boy grip", "Best Boy Grip", "Lighting"),
    ("lighting director", "Lighting Director", "Lighting"),
    ("lighting designer", "Lighting Designer", "Lighting"),
    ("key grip", "Key Grip", "Lighting"),
    ("gaffer", "Gaffer", "Lighting"),
    ("electrician", "Electrician", "Lighting"),
    ("grip", "Grip", "Lighting"),
    ("bbe", "Best Boy Electric", "Lighting"),
    ("bbg", "Best Boy Grip", "Lighting"),
    # Art and wardrobe
    ("production designer", "Production Designer", "Art"),
    ("art director", "Art Director", "Art"),
    ("set decorator", "Set Decorator", "Art"),
    ("set designer", "Set Designer", "Art"),
    ("set design assistant", "Set Design Assistant", "Art"),
    ("props master", "Props Master", "Art"),
    ("prop stylist", "Prop Stylist", "Art"),
    ("costume designer", "Costume Designer", "Art"),
    ("wardrobe stylist", "Wardrobe Stylist", "Art"),
    ("wardrobe", "Wardrobe", "Art"),
    ("styling assistant", "Styling Assistant", "Art"),
    ("stylist", "Stylist", "Art"),
    # Glamour
    ("hair & makeup artist", "Hair & Makeup Artist", "Glamour"),
    ("hair and makeup artist", "Hair & Makeup Artist", "Glamour"),
    ("hair & makeup", "Hair & Makeup Artist", "Glamour"),
    ("hair and makeup", "Hair & Makeup Artist", "Glamour"),
    ("makeup artist", "Makeup Artist", "Glamour"),
    ("hair stylist", "Hair Stylist", "Glamour"),
    ("hair artist", "Hair Artist", "Glamour"),
    ("groomer", "Groomer", "Glamour"),
    ("manicurist", "Manicurist", "Glamour"),
    ("nail artist", "Nail Artist", "Glamour"),
    ("hmua", "Hair & Makeup Artist", "Glamour"),
    ("hmu", "Hair & Makeup Artist", "Glamour"),
    ("mua", "Makeup Artist", "Glamour"),
    ("hua", "Hair Artist", "Glamour"),
    ("makeup", "Makeup Artist", "Glamour"),
    ("hair", "Hair Stylist", "Glamour"),
    # Production
    ("unit production manager", "Unit Production Manager", "Production"),
    ("production manager", "Production Manager", "Production"),
    ("production coordinator", "Production Coordinator", "Production"),
    ("production assistant", "Production Assistant", "Production"),
    ("assistant director", "Assistant Director", "Production"),
    ("script supervisor", "Script Supervisor", "Production"),
    ("location manager", "Location Manager", "Production"),
    ("location scout", "Location Scout", "Production"),
    ("casting director", "Casting Director", "Production"),
    ("casting", "Casting Director", "Production"),
    ("coordinator", "Coordinator", "Production"),
    ("ad", "Assistant Director", "Production"),
    ("pa", "Production Assistant", "Production"),
    # Post
    ("post production supervisor", "Post Production Supervisor", "Post"),
    ("visual effects supervisor", "VFX Supervisor", "Post"),
    ("vfx supervisor", "VFX Supervisor", "Post"),
    ("assistant editor", "Assistant Editor", "Post"),
    ("editor", "Editor", "Post"),
    ("colorist", "Colorist", "Post"),
    ("retoucher", "Retoucher", "Post"),
    # Talent
    ("voice over", "Voice Over", "Talent"),
    ("presenter", "Presenter", "Talent"),
    ("influencer", "Influencer", "Talent"),
    ("actress", "Actress", "Talent"),
    ("actor", "Actor", "Talent"),
    ("model", "Model", "Talent"),
    ("talent", "Talent", "Talent"),
    ("host", "Host", "Talent"),
    ("agent", "Agent", "Talent"),
    # Logistics
    ("transportation coordinator", "Transportation Coordinator", "Logistics"),
    ("craft services", "Craft Services", "Logistics"),
    ("catering", "Catering", "Logistics"),
    ("security", "Security", "Logistics"),
    ("driver", "Driver", "Logistics"),
    ("runner", "Runner", "Logistics"),
    ("medic", "Medic", "Logistics"),
    ("assistant", "Assistant", ""),
)

ROLE_TITLES: Mapping[str, str] = MappingProxyType({phrase: title for phrase, title, _ in _ROLE_TABLE})
ROLE_DEPARTMENTS: Mapping[str, str] = MappingProxyType(
    {title.lower(): department for _, title, department in _ROLE_TABLE if department}
)

# Short uppercase abbreviations only count when written in capitals or used as a label.
ROLE_ACRONYMS = frozenset(phrase for phrase, _, _ in _ROLE_TABLE if len(phrase) <= 4 and " " not in phrase and phrase.isalpha() and phrase not in {"hair", "host", "grip"})

_RANK_PATTERN = r"1st|2nd|3rd|[4-9]th|first|second|third|key|lead|head|chief|senior|junior|associate|assistant"
_ROLE_ALTERNATION = "|".join(
    re.escape(phrase) for phrase in sorted(ROLE_TITLES, key=len, reverse=True)
)
ROLE_RE = re.compile(
    rf"(?<![\w@.])(?:(?P<rank>{_RANK_PATTERN})\s+)?(?P<role>{_ROLE_ALTERNATION})(?![\w@])",
    re.IGNORECASE,
)
NUMBERED_ROLE_RE = re.compile(r"^(?:1st|2nd|3rd|[4-9]th|first|second|third)\b", re.IGNORECASE)

# Roles whose lines follow the "Model: NAME / Agency Agent / Phone" convention.
TALENT_ROLES = frozenset({"model", "talent", "actor", "actress", "host", "presenter", "influencer", "voice over"})


def department_for_role(role: Optional[str]) -> str:
    """Return the department implied by a canonical role title, if any."""

    if not role:
        return ""
    lowered = role.lower()
    stripped = re.sub(rf"^(?:{_RANK_PATTERN})\s+", "", lowered)
    return ROLE_DEPARTMENTS.get(lowered) or ROLE_DEPARTMENTS.get(stripped, "")


# --- Section headers ---

SECTION_HEADERS: Tuple[str, ...] = (
    "CREW",
    "CREW LIST",
    "CREW CONTACTS",
    "TALENT",
    "CAST",
    "CLIENT",
    "CLIENTS",
    "AGENCY",
    "PRODUCTION",
    "PRODUCTION TEAM",
    "PRODUCTION CREW",
    "STAFF",
    "TEAM",
    "TEAM MEMBERS",
    "PERSONNEL",
    "CONTACTS",
    "CONTACT LIST",
    "KEY CONTACTS",
    "HAIR & MAKEUP",
    "HAIR AND MAKEUP",
    "HAIR/MAKEUP",
    "GLAM",
    "WARDROBE",
    "STYLING",
    "CAMERA",
    "SOUND",
    "LIGHTING",
    "GRIP",
    "ELECTRIC",
    "GRIP & ELECTRIC",
    "ART",
    "ART DEPARTMENT",
    "SET DESIGN",
    "MODELS",
    "ACTORS",
    "PRESENTERS",
    "VOICE",
    "PHOTO",
    "PHOTOGRAPHY",
    "VIDEO",
    "POST",
    "POST PRODUCTION",
    "CASTING",
    "DIRECTORS",
    "PRODUCERS",
    "TRANSPORTATION",
    "CATERING",
    "LOGISTICS",
    "VENDORS",
)
SECTION_HEADER_SET = frozenset(SECTION_HEADERS)

_SECTION_KIND_PATTERNS: Tuple[Tuple[str, "re.Pattern[str]"], ...] = (
    ("talent", re.compile(r"talent|cast|model|actor|presenter|voice", re.IGNORECASE)),
    ("client", re.compile(r"client|agency", re.IGNORECASE)),
    ("crew", re.compile(r"crew|staff|team|production|personnel", re.IGNORECASE)),
)


def section_kind(header: str) -> str:
    for kind, pattern in _SECTION_KIND_PATTERNS:
        if pattern.search(header):
            return kind
    return "general"


# --- Lines that never describe a person ---

SKIP_PATTERNS: Tuple["re.Pattern[str]", ...] = (
    re.compile(
        r"^(?:call\s*time|crew\s*call|general\s*call|talent\s*call|location|loc|address|parking|"
        r"date|shoot\s*date|project|job|job\s*#|po|weather|sunrise|sunset|lunch|wrap|breakfast|"
        r"(?:nearest\s*)?hospital|notes?|important|please|send\s*to|call\s*sheet|schedule|"
        r"dietary(?:\s*restrictions)?|day|page|billing)\s*[:#]",
        re.IGNORECASE,
    ),
    re.compile(r"^\d{1,2}(?::\d{2})?\s*(?:am|pm)\b", re.IGNORECASE),
    re.compile(r"^\d{1,2}:\d{2}\b"),
    re.compile(r"^(?:monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b", re.IGNORECASE),
    re.compile(r"^[\d\s\-/.,]+$"),
    re.compile(r"^(?:table|row|column|page)\b", re.IGNORECASE),
    re.compile(r"^contact\s*#?\s*\d+\s*:?\s*$", re.IGNORECASE),
)

SEPARATOR_RE = re.compile(r"^\s*[=\-_*~#.+|]{3,}\s*$")

# Labels of "Label: value" lines that describe logistics rather than a person.
NON_PERSON_LABELS = frozenset(
    {
        "agency",
        "client",
        "company",
        "production company",
        "studio",
        "address",
        "location",
        "website",
        "web",
        "url",
        "project",
        "brand",
    }
)

# --- Key/value labels ---

FIELD_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "name": "name",
        "full name": "name",
        "contact name": "name",
        "email": "email",
        "e-mail": "email",
        "email address": "email",
        "mail": "email",
        "phone": "phone",
        "phone number": "phone",
        "cell": "phone",
        "mobile": "phone",
        "tel": "phone",
        "telephone": "phone",
        "role": "role",
        "title": "role",
        "position": "role",
        "job title": "role",
        "company": "company",
        "agency": "company",
        "organization": "company",
        "organisation": "company",
        "department": "department",
        "dept": "department",
        "agent": "agent",
    }
)

HEADER_KEYWORDS: Mapping[str, str] = MappingProxyType(
    {
        "name": "name",
        "talent": "name",
        "email": "email",
        "e-mail": "email",
        "mail": "email",
        "phone": "phone",
        "cell": "phone",
        "mobile": "phone",
        "tel": "phone",
        "contact": "phone",
        "role": "role",
        "position": "role",
        "title": "role",
        "job": "role",
        "company": "company",
        "agency": "company",
        "organization": "company",
        "organisation": "company",
        "agent": "agent",
        "department": "department",
        "dept": "department",
    }
)

# --- Names ---

NON_NAME_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "of", "for", "to", "at", "by", "with", "from", "in", "on",
        "our", "we", "you", "your", "this", "that", "is", "are", "be", "as", "if", "it", "he", "she",
        "him", "her", "they", "them", "reach", "call", "sheet", "time", "date", "location", "email",
        "e-mail", "phone", "cell", "mobile", "tel", "name", "names", "contact", "contacts", "list",
        "crew", "cast", "team", "staff", "production", "note", "notes", "please", "project",
        "client", "clients", "agency", "company", "dept", "department", "section", "role",
        "title", "position", "am", "pm", "tbd", "tba", "n/a", "none", "remote", "studio",
        "studios", "productions", "models", "inc", "llc", "ltd", "corp", "group", "media",
        "films", "pictures", "entertainment", "management", "monday", "tuesday", "wednesday",
        "thursday", "friday", "saturday", "sunday", "january", "february", "march",
        "july", "september", "october", "november", "december",
        "styling", "camera", "sound", "lighting", "electric", "international", "day", "page",
        "photography", "photo", "video", "editorial", "shoot", "wrap", "lunch", "total", "call",
        "main", "office", "info", "lead", "key", "head", "chief", "senior", "junior", "first",
        "second", "third", "glam", "post", "art", "set", "personnel", "vendors", "logistics",
        "transportation", "hospital", "parking", "address", "website", "for", "via", "per",
        "mr", "mrs", "ms", "dr",
    }
    | {word for phrase in ROLE_TITLES for word in phrase.split()}
)

# lower-case surname particles allowed inside a name ("Vincent van Gogh")
NAME_PARTICLES = frozenset({"van", "von", "de", "da", "der", "den", "del", "della", "di", "du", "la", "le", "dos", "das", "ter"})

# --- Companies and email domains ---

COMPANY_SUFFIXES = frozenset(
    {
        "inc", "inc.", "llc", "ltd", "ltd.", "corp", "corp.", "co", "co.", "company", "productions",
        "studios", "studio", "models", "agency", "media", "films", "pictures", "entertainment",
        "group", "management", "creative", "partners", "collective", "rentals", "casting",
    }
)

PERSONAL_DOMAINS = frozenset(
    {
        "gmail.com", "googlemail.com", "yahoo.com", "hotmail.com", "outlook.com", "aol.com",
        "icloud.com", "me.com", "mac.com", "protonmail.com", "proton.me", "mail.com",
        "yandex.com", "gmx.com", "zoho.com", "live.com", "msn.com",
    }
)

GENERIC_EMAIL_PREFIXES = frozenset(
    {
        "info", "contact", "admin", "support", "help", "sales", "hello", "team", "office",
        "mail", "noreply", "no-reply", "billing", "accounts", "bookings",
    }
)

SUSPICIOUS_EMAIL_MARKERS: Tuple[str, ...] = ("test", "example")

# --- Unreadable text ---

PDF_STRUCTURE_MARKERS: Tuple[str, ...] = (
    "endobj",
    "endstream",
    "xref",
    "trailer",
    "startxref",
    "%%EOF",
    "/Type",
    "/Subtype",
    "/Filter",
)


__all__ = [
    "COMPANY_SUFFIXES",
    "FIELD_LABELS",
    "GENERIC_EMAIL_PREFIXES",
    "HEADER_KEYWORDS",
    "NAME_PARTICLES",
    "NON_NAME_WORDS",
    "NON_PERSON_LABELS",
    "NUMBERED_ROLE_RE",
    "PDF_STRUCTURE_MARKERS",
    "PERSONAL_DOMAINS",
    "ROLE_ACRONYMS",
    "ROLE_DEPARTMENTS",
    "ROLE_RE",
    "ROLE_TITLES",
    "SECTION_HEADERS",
    "SECTION_HEADER_SET",
    "SEPARATOR_RE",
    "SKIP_PATTERNS",
    "SUSPICIOUS_EMAIL_MARKERS",
    "TALENT_ROLES",
    "department_for_role",
    "section_kind",
]
