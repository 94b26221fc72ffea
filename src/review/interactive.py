"""Terminal review loop: one prompt per suggestion, decisions applied immediately."""

import logging
from collections.abc import Callable

from src.core.store import ProfileNotFoundError
from src.review.engine import ApplyEngine, ReviewSession
from src.review.formatting import no_suggestions_hint, section_label, word_wrap

logger = logging.getLogger(__name__)

PROMPT = "  [a]pprove  [s]kip  [e]dit  [m]anual add  [q]uit > "

Reader = Callable[[str], str]
Writer = Callable[[str], None]


def _quote(text: str, write: Writer) -> None:
    for line in text.split("\n"):
        write(f"  > {line}")


def run_interactive_review(
    engine: ApplyEngine,
    job_id: str | None = None,
    *,
    read: Reader = input,
    write: Writer = print,
) -> ReviewSession | None:
    """Walk the namespace's suggestions, applying each decision as it is made.

    Returns the session (for its decisions), or None when there is nothing
    to review. ``read``/``write`` default to the terminal.
    """
    data = engine.suggestions.load(job_id)
    if data is None or not data.suggestions:
        write(no_suggestions_hint(job_id))
        return None

    suggestions = data.suggestions
    total = len(suggestions)
    session = ReviewSession(engine, job_id)

    write(f"Resume Review - {total} suggestion{'' if total == 1 else 's'}")
    if data.job_id:
        write(f"  {data.job_id}")
    write("Interactive - press a/s/e/m/q for each")
    write("")

    for i, s in enumerate(suggestions):
        write(f"[{i + 1}/{total}] {section_label(s.section)} - {s.type}")
        write("  Current:")
        _quote(s.current, write)
        if s.type != "remove":
            write("  Suggested:")
            _quote(s.suggested, write)
        reason = word_wrap(s.reason, 60)
        write(f"  Why: {reason[0]}")
        for line in reason[1:]:
            write(f"  {line}")
        write(f"  ({s.principle})")

        try:
            choice = read(PROMPT).strip().lower()[:1]
            if choice == "q":
                break
            if choice == "a":
                session.approve(s)
                write("  Applied.")
            elif choice == "e":
                edited = read("  Enter your version > ").strip()
                if edited:
                    session.edit(s, edited)
                    write("  Applied (edited).")
                else:
                    session.pass_over(s)
                    write("  Skipped (empty input).")
            elif choice == "m":
                section = read("  section > ").strip()
                text = read("  text > ").strip()
                if session.manual(section, text, i) is None:
                    session.pass_over(s)
                    write("  Skipped (empty input).")
                else:
                    write("  Applied (manual).")
            else:
                session.skip(s)
                write("  Skipped.")
        except EOFError:
            # stdin closed: stop as if the user quit
            write("")
            break
        except ProfileNotFoundError as e:
            write(f"  Error: {e}")
        write("")

    _summarize(session, total, write)
    return session


def _summarize(session: ReviewSession, total: int, write: Writer) -> None:
    write(f"Done! {session.changes_applied} change(s) applied out of {total} suggestions.")
    for action, label in (
        ("approved", "Approved"),
        ("edited", "Edited"),
        ("manual", "Manual"),
    ):
        decisions = session.by_action(action)  # type: ignore[arg-type]
        if decisions:
            write(f"  {label}: " + ", ".join(f"#{d.id} {d.section}" for d in decisions))
    skipped = session.by_action("skipped")
    if skipped:
        write("  Skipped: " + ", ".join(f"#{d.id}" for d in skipped))
