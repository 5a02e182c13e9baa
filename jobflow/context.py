"""Build the briefing that grounds the career coach in the user's data."""
from __future__ import annotations

from jobflow.analytics import CoachStats
from jobflow.models import Job, Resume, Section

RECENT_LIMIT = 5

PERSONA = (
    "You are Claire, a friendly, empathetic, and highly intelligent AI Career Coach.\n"
    "Your goal is to help the user navigate their job search, provide emotional support, "
    "and give strategic advice."
)

STRATEGIC_DIRECTIVES: tuple[str, ...] = (
    "1. If Conversion Rate < 10% and Total Applications > 10: Suggest resume improvements based on their current role.",
    "2. If user has an upcoming interview: Offer to roleplay for that specific role.",
    "3. If user got a rejection: Be empathetic and remind them of their skills.",
    "4. If user got an offer: Celebrate!",
)

CLOSING = "Respond as Claire. Keep it concise, natural, and encouraging."

NOT_LISTED = "Not listed"
NOT_PROVIDED = "Not provided"
NO_RECENT = "No recent applications"
NO_INTERVIEWS = "None scheduled"


def _headline(sections: list[Section]) -> str:
    if not sections:
        return NOT_LISTED
    first = sections[0]
    return f"{first.title} ({first.date})"


def assemble_briefing(jobs: list[Job], resume: Resume, stats: CoachStats) -> str:
    """Render identity, stats, recent activity, interviews and the fixed directives.

    *jobs* is expected newest first, as the store returns them. Empty
    sections are kept with an explicit marker.
    """
    recent = [f"- {j.role} at {j.company} ({j.status})" for j in jobs[:RECENT_LIMIT]]
    interviews = [f"- {j.role} at {j.company}" for j in jobs if j.status == "Interview"]

    lines: list[str] = [PERSONA, ""]

    lines.append("User Identity:")
    lines.append(f"- Name: {resume.full_name or 'User'}")
    lines.append(f"- Current Role: {_headline(resume.experience)}")
    lines.append(f"- Education: {_headline(resume.education)}")
    lines.append(f"- Top Skills: {resume.skills or NOT_PROVIDED}")
    lines.append(f"- Summary: {resume.summary or NOT_PROVIDED}")
    lines.append("")

    lines.append("Job Search Stats:")
    lines.append(f"- Total Applications: {stats.total_applications}")
    lines.append(f"- Interviews: {stats.interviews}")
    lines.append(f"- Offers: {stats.offers}")
    lines.append(f"- Conversion Rate: {stats.conversion_rate}%")
    lines.append("")

    lines.append(f"Recent Activity (Last {RECENT_LIMIT}):")
    lines.extend(recent or [NO_RECENT])
    lines.append("")

    lines.append("Upcoming Interviews:")
    lines.extend(interviews or [NO_INTERVIEWS])
    lines.append("")

    lines.append("Strategic Logic:")
    lines.extend(STRATEGIC_DIRECTIVES)
    lines.append("")
    lines.append(CLOSING)
    return "\n".join(lines)
