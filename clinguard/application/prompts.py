from clinguard.domain.models import Decision
from clinguard.domain.rules import IMAGE_SEED_CHARS

from .schemas import AnalysisResult


# Output markers shared by the system prompt and the parser.
DECISION_MARKER = "Decision:"
RATIONALE_MARKER = "Rationale:"
CONDITIONAL_MARKER = "If Decision"
QUESTIONS_MARKER = "Questions:"
ANSWER_MARKER = "Answer:"
EVIDENCE_MARKER = "Evidence:"
SELF_ASSESSMENT_MARKER = "Self-Assessment"
PLAUSIBILITY_MARKER = "Plausibility:"
CAUSAL_SENSITIVITY_MARKER = "Causal Sensitivity:"
HALLUCINATION_CHECK_MARKER = "Hallucination Check:"
CONFIDENCE_MARKER = "Confidence Level:"

RATIONALE_END_MARKERS = (
    CONDITIONAL_MARKER,
    QUESTIONS_MARKER,
    ANSWER_MARKER,
    SELF_ASSESSMENT_MARKER,
)


SYSTEM_PROMPT = f"""You are a safety-critical clinical reasoning assistant.
Given a clinical note and a task, decide whether there is enough information to respond SAFELY.

CORE RULES:
1) Output exactly ONE decision: ASK or ANSWER.
2) Choose ASK if: Safety-critical variables missing, information is ambiguous/contradictory, or acting could cause harm.
3) Do NOT assume missing values, infer unreported facts, or hallucinate.
4) If ASK: Ask MINIMUM specific questions. NO recommendations.
5) If ANSWER: Brief, conservative, grounded in note. Use uncertainty language.
6) Express uncertainty explicitly (e.g., "unclear"). No numeric probabilities.

OUTPUT FORMAT (STRICT):
{DECISION_MARKER} [ASK or ANSWER]

{RATIONALE_MARKER}
[1-3 sentences citing note]

{CONDITIONAL_MARKER} = ASK:
{QUESTIONS_MARKER}
- [clarifying question 1]

{CONDITIONAL_MARKER} = ANSWER:
{ANSWER_MARKER}
[brief clinical response]

{EVIDENCE_MARKER}
- [quote or paraphrase]

{SELF_ASSESSMENT_MARKER} (STRICT FORMAT):
{PLAUSIBILITY_MARKER} [HIGH / MEDIUM / LOW]
{CAUSAL_SENSITIVITY_MARKER} [CAUSALLY SENSITIVE / CAUSALLY INSENSITIVE]
{HALLUCINATION_CHECK_MARKER} [YES / NO]
{CONFIDENCE_MARKER} [LOW / MODERATE / HIGH]"""


IMAGE_PROMPT_TEMPLATE = (
    "A clean, professional medical illustration or diagnostic diagram based on this clinical summary: "
    "{summary}. Textbook style, clear anatomical focus, white background, high resolution, clinical accuracy."
)


def build_user_prompt(effective_note: str, task: str) -> str:
    return f"Clinical Note: {effective_note}\n\nTask: {task}"


def build_image_prompt(summary: str) -> str:
    return IMAGE_PROMPT_TEMPLATE.format(summary=summary[:IMAGE_SEED_CHARS])


def format_result(result: AnalysisResult) -> str:
    """Render a result back through the strict output format."""
    lines = [
        f"{DECISION_MARKER} {result.decision.value}",
        "",
        RATIONALE_MARKER,
        result.rationale,
        "",
    ]
    if result.decision == Decision.ASK:
        lines.append(QUESTIONS_MARKER)
        lines.extend(f"- {q}" for q in result.questions or [])
        lines.append("")
    else:
        lines.append(ANSWER_MARKER)
        lines.append(result.answer or "")
        lines.append("")
        lines.append(EVIDENCE_MARKER)
        lines.extend(f"- {e}" for e in result.evidence or [])
        lines.append("")

    sa = result.self_assessment
    lines.extend([
        f"{SELF_ASSESSMENT_MARKER} (STRICT FORMAT):",
        f"{PLAUSIBILITY_MARKER} {sa.plausibility.value}",
        f"{CAUSAL_SENSITIVITY_MARKER} {sa.causal_sensitivity.value}",
        f"{HALLUCINATION_CHECK_MARKER} {sa.hallucination_check.value}",
        f"{CONFIDENCE_MARKER} {sa.confidence.value}",
    ])
    return "\n".join(lines)
