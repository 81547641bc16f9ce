"""Terminal output helpers.

Formatting for step headers and for the human-readable release plan.
"""

from __future__ import annotations

from .models import ReleasePlan


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of planning in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def format_plan(plan: ReleasePlan) -> str:
    """Render a release plan as text, one release per line.

    Example:
        pkg-a: 1.0.0 → 2.0.0 (major) [brave-owls-dance]
        pkg-b: 1.0.0 → 1.0.1 (patch) [forced]
    """
    if not plan.releases:
        return "No releases planned."
    lines: list[str] = []
    for release in plan.releases:
        # Releases forced by propagation or linking have no changesets
        source = ", ".join(release.changesets) or "forced"
        lines.append(
            f"{release.name}: {release.old_version} → {release.new_version} "
            f"({release.type.value}) [{source}]"
        )
    return "\n".join(lines)
