"""Plain-text rendering of suggestion sets for the terminal."""

import re
from collections import Counter

from src.core.schemas import SuggestionsFile


def truncate(text: str, max_len: int) -> str:
    """Collapse to one line and cut to ``max_len`` characters with an ellipsis."""
    one_line = text.replace("\n", " ").strip()
    if len(one_line) <= max_len:
        return one_line
    return one_line[: max_len - 3] + "..."


def word_wrap(text: str, width: int) -> list[str]:
    """Greedy word wrap. Always returns at least one (possibly empty) line."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        if current and len(current) + len(word) + 1 > width:
            lines.append(current)
            current = word
        else:
            current = f"{current} {word}" if current else word
    if current:
        lines.append(current)
    return lines or [""]


def section_label(section: str) -> str:
    """``experience[0].bullets[1]`` -> ``EXPERIENCE #0 > BULLETS #1``."""
    label = re.sub(r"\[(\d+)\]", r" #\1", section.upper())
    return label.replace(".", " > ")


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def no_suggestions_hint(job_id: str | None = None) -> str:
    target = f" {job_id}" if job_id else ""
    return f"No suggestions found. Run `review{target}` first to generate them."


def format_suggestions_list(data: SuggestionsFile | None, job_id: str | None = None) -> str:
    """Summary of every suggestion: header, one block each, counts by type."""
    if data is None or not data.suggestions:
        return no_suggestions_hint(job_id)

    suggestions = data.suggestions
    context = data.job_id or "general"
    lines = [f"Resume Review - {_plural(len(suggestions), 'suggestion')} ({context})", ""]

    for s in suggestions:
        id_str = f"#{s.id}".rjust(3)
        lines.append(f" {id_str}  {s.section.ljust(28)} {s.type.ljust(12)} [{s.principle}]")
        lines.append(f"      Current:  {truncate(s.current, 55)}")
        if s.type != "remove":
            lines.append(f"      Suggest:  {truncate(s.suggested, 55)}")
        lines.append("")

    counts = Counter(s.type for s in suggestions)
    lines.append("Summary: " + ", ".join(_plural(n, t) for t, n in counts.items()))
    return "\n".join(lines)
