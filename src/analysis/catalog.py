"""Cognitive distortion reference catalog."""

from shared_types import DistortionType

DISTORTION_INFO: dict[str, dict[str, str]] = {
    DistortionType.ALL_OR_NOTHING: {
        "name": "All-or-Nothing Thinking",
        "description": "Seeing things in black and white categories, with no middle ground",
    },
    DistortionType.OVERGENERALIZATION: {
        "name": "Overgeneralization",
        "description": "Drawing broad conclusions from a single event or piece of evidence",
    },
    DistortionType.MENTAL_FILTER: {
        "name": "Mental Filter",
        "description": "Focusing exclusively on negative details while ignoring positive aspects",
    },
    DistortionType.DISQUALIFYING_POSITIVE: {
        "name": "Disqualifying the Positive",
        "description": "Dismissing positive experiences as not counting or being flukes",
    },
    DistortionType.JUMPING_TO_CONCLUSIONS: {
        "name": "Jumping to Conclusions",
        "description": (
            "Making negative interpretations without evidence (mind reading or fortune telling)"
        ),
    },
    DistortionType.MAGNIFICATION: {
        "name": "Magnification/Catastrophizing",
        "description": "Exaggerating the importance of negative events or minimizing positive ones",
    },
    DistortionType.EMOTIONAL_REASONING: {
        "name": "Emotional Reasoning",
        "description": "Assuming that negative emotions reflect reality",
    },
    DistortionType.SHOULD_STATEMENTS: {
        "name": "Should Statements",
        "description": (
            "Using should, must, or ought statements that create unrealistic expectations"
        ),
    },
    DistortionType.LABELING: {
        "name": "Labeling",
        "description": "Attaching negative labels to yourself or others based on mistakes",
    },
    DistortionType.PERSONALIZATION: {
        "name": "Personalization",
        "description": "Taking responsibility for events outside of your control",
    },
    DistortionType.COMPARISON: {
        "name": "Comparison",
        "description": "Making unfair comparisons to others that diminish self-worth",
    },
    DistortionType.BLAME: {
        "name": "Blame",
        "description": "Blaming yourself or others excessively for problems",
    },
}

_UNKNOWN = {"name": "Unknown Distortion", "description": "No description available"}


def distortion_info(distortion_type: str) -> dict[str, str]:
    return DISTORTION_INFO.get(distortion_type, _UNKNOWN)


def list_distortions() -> list[dict[str, str]]:
    """Catalog as a list of {type, name, description}."""
    return [{"type": str(key), **info} for key, info in DISTORTION_INFO.items()]
