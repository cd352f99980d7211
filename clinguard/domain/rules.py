from typing import Dict, List, Optional

from .models import Decision


SUPPLEMENTAL_DELIMITER = "[SUPPLEMENTAL UPDATES]:"

# Image heuristic: any ANSWER, or an ASK whose rationale runs past this length.
IMAGE_RATIONALE_THRESHOLD = 50
IMAGE_SEED_CHARS = 300


def compose_effective_note(note: str, history: Optional[List[str]] = None) -> str:
    """Append supplemental updates to the base note, one entry per line."""
    if not history:
        return note
    return f"{note}\n\n{SUPPLEMENTAL_DELIMITER}\n" + "\n".join(history)


def format_supplemental_answers(answers: Dict[int, str]) -> List[str]:
    """Turn answers keyed by zero-based question index into history entries.

    Blank answers are dropped; the remaining ones keep question order.
    """
    entries: List[str] = []
    for idx in sorted(answers):
        value = (answers[idx] or "").strip()
        if value:
            entries.append(f"Answer to Q{idx + 1}: {value}")
    return entries


def should_request_image(decision: Decision, rationale: str) -> bool:
    return decision == Decision.ANSWER or len(rationale) > IMAGE_RATIONALE_THRESHOLD


def image_seed(answer: Optional[str], rationale: str) -> str:
    return (answer or rationale)[:IMAGE_SEED_CHARS]
