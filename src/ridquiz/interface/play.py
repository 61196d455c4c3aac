"""Interactive terminal loop that drives a QuizSession."""

import typer

from ridquiz.application.session_engine import QuizSession
from ridquiz.domain.models import Gender, Phase, VocabEntry

GENDER_CHOICES = [g.value for g in Gender]

INSTRUCTIONS = """\
Each word is asked twice: first its meaning, then its grammatical gender.
Type the number of your answer. Other keys:
  b = back, n = next/skip, s = speak the word, r = reset score, q = quit
Tip: masculine nouns usually end in a consonant or -й, feminine in -а/-я,
neuter in -о/-е. There are exceptions (дядько is masculine, ніч is feminine).
"""


def run_session(session: QuizSession, show_instructions: bool = True) -> None:
    """Prompt until the user quits or there is nothing to quiz."""
    if show_instructions:
        typer.echo(INSTRUCTIONS)

    while True:
        if session.show_summary:
            if not _summary_step(session):
                return
            continue

        entry = session.current
        if entry is None:
            typer.secho("No words loaded. Check the active categories.", fg="yellow")
            return

        if not _card_step(session, entry):
            return


def _card_step(session: QuizSession, entry: VocabEntry) -> bool:
    phase = session.phase
    typer.echo("")
    typer.echo(f"{session.counter_text}  |  {session.score_text}  |  {session.progress:.0%}")
    typer.secho(f"  {entry.word}", bold=True)

    choices: list[str] = []
    if phase == Phase.AWAITING_MEANING:
        typer.echo("Select the meaning:")
        choices = session.meaning_options
    elif phase == Phase.AWAITING_GENDER:
        _show_meaning_feedback(session, entry)
        typer.echo("Select the gender:")
        choices = GENDER_CHOICES
    else:
        _show_meaning_feedback(session, entry)
        _show_gender_feedback(session, entry)

    for i, choice in enumerate(choices, 1):
        typer.echo(f"  {i}. {choice}")

    keys = "b/n/s/r/q" if session.can_go_back else "n/s/r/q"
    label = f"Answer ({keys})" if choices else f"Enter for next word ({keys})"
    raw = typer.prompt(label, default="", show_default=False).strip().lower()
    return _dispatch(session, raw, phase, choices)


def _show_meaning_feedback(session: QuizSession, entry: VocabEntry) -> None:
    state = session.current_state
    if state is None or state.selected_meaning is None:
        return
    if state.meaning_correct:
        typer.secho(f"Meaning: {entry.meaning}", fg="green")
    else:
        typer.secho(
            f"Meaning: {state.selected_meaning} (correct meaning: {entry.meaning})", fg="red"
        )


def _show_gender_feedback(session: QuizSession, entry: VocabEntry) -> None:
    state = session.current_state
    if state is None or state.selected_gender is None:
        return
    if state.gender_correct:
        typer.secho(f"Gender: {entry.gender.value.capitalize()}", fg="green")
    else:
        typer.secho(
            f"Gender: {state.selected_gender} "
            f"(correct gender: {entry.gender.value.capitalize()})",
            fg="red",
        )


def _dispatch(session: QuizSession, raw: str, phase: Phase | None, choices: list[str]) -> bool:
    if raw == "q":
        return False
    if raw == "b":
        if not session.previous():
            typer.secho("Nothing to go back to.", fg="yellow")
        return True
    if raw == "s":
        session.speak_current_word()
        return True
    if raw == "r":
        session.reset_score()
        typer.echo("Score reset.")
        return True
    if raw == "n" or (raw == "" and phase == Phase.COMPLETED):
        session.next()
        return True

    if raw.isdigit() and 1 <= int(raw) <= len(choices):
        choice = choices[int(raw) - 1]
        if phase == Phase.AWAITING_MEANING:
            session.submit_meaning(choice)
        else:
            session.submit_gender(choice)
        return True

    if raw:
        typer.secho(f"Unknown input: {raw!r}", fg="yellow")
    return True


def _summary_step(session: QuizSession) -> bool:
    summary = session.summary()
    typer.echo("")
    typer.secho("Session Summary", bold=True)
    typer.echo(
        f"Accuracy: {summary.accuracy}%  Correct: {summary.correct}  Total: {summary.total}"
    )

    if summary.missed_items:
        typer.echo("Missed words:")
        for item in summary.missed_items:
            typer.echo(f"  {item.word} - {item.meaning} • {item.gender.value.capitalize()}")
        keys = "[r]etry missed, [n]ew session, [q]uit"
    else:
        if summary.perfect:
            typer.secho("Perfect! You didn't miss any words this time.", fg="green")
        keys = "[n]ew session, [q]uit"

    raw = typer.prompt(keys, default="q", show_default=False).strip().lower()
    if raw == "q":
        return False
    if raw == "r" and summary.missed_items:
        session.retry_missed_only()
    elif raw == "n":
        session.start_new_session_from_filters()
    else:
        typer.secho(f"Unknown input: {raw!r}", fg="yellow")
    return True
