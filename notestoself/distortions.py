"""Built-in cognitive distortion categories.

Fixed reference data referenced by id from CBT entries. Never persisted
by the stores and never synced.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from notestoself.types import CBTEntry, normalize_id


@dataclass(frozen=True)
class CognitiveDistortion:
    """A type of thinking error."""

    id: str
    emoji: str
    title: str
    description: str


ALL_DISTORTIONS: List[CognitiveDistortion] = [
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000001",
        emoji="⚫️",
        title="All-or-Nothing Thinking",
        description=(
            "Seeing things in black and white categories. If your performance falls "
            "short of perfect, you see yourself as a total failure."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000002",
        emoji="🔮",
        title="Overgeneralization",
        description="Seeing a single negative event as a never-ending pattern of defeat.",
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000003",
        emoji="🔍",
        title="Mental Filter",
        description=(
            "Picking out a single negative detail and dwelling on it exclusively so "
            "your vision of reality becomes darkened."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000004",
        emoji="❌",
        title="Disqualifying the Positive",
        description="Rejecting positive experiences by insisting they 'don't count' for some reason.",
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000005",
        emoji="🧠",
        title="Jumping to Conclusions",
        description=(
            "Making negative interpretations without actual evidence. "
            "Mind reading or fortune telling."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000006",
        emoji="🔬",
        title="Magnification or Minimization",
        description=(
            "Exaggerating the importance of things (like mistakes) or inappropriately "
            "shrinking things until they appear tiny."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000007",
        emoji="💭",
        title="Emotional Reasoning",
        description=(
            "Assuming that your negative emotions reflect the way things really are: "
            "'I feel it, therefore it must be true.'"
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000008",
        emoji="📋",
        title="Should Statements",
        description=(
            "Trying to motivate yourself with 'shoulds' and 'shouldn'ts', as if you "
            "need to be whipped and punished before you can do anything."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000009",
        emoji="🏷️",
        title="Labeling",
        description=(
            "An extreme form of overgeneralization. Instead of describing an error, "
            "you attach a negative label to yourself."
        ),
    ),
    CognitiveDistortion(
        id="00000000-0000-0000-0000-000000000010",
        emoji="👈",
        title="Personalization",
        description=(
            "Seeing yourself as the cause of some negative external event for which "
            "you were not primarily responsible."
        ),
    ),
]

_BY_ID: Dict[str, CognitiveDistortion] = {d.id: d for d in ALL_DISTORTIONS}


def get_distortion(distortion_id: str) -> Optional[CognitiveDistortion]:
    """Look up a built-in distortion, or None if the id is unknown."""
    try:
        return _BY_ID.get(normalize_id(distortion_id))
    except ValueError:
        return None


def distortions_for(entry: CBTEntry) -> List[CognitiveDistortion]:
    """Resolve an entry's distortion references, skipping unknown ids."""
    found = []
    for distortion_id in entry.distortion_ids:
        distortion = get_distortion(distortion_id)
        if distortion is not None:
            found.append(distortion)
    return found
