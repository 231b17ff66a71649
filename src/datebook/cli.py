"""Datebook CLI - personal appointment calendar."""

import json
import logging
import sys
from datetime import datetime

import click

from .config import Config, load_config
from .core.appointments import Appointment, RecurrenceKind
from .core.dates import (
    DATE_FORMAT,
    DATETIME_FORMAT,
    add_years,
    end_of_day,
    parse_date,
)
from .manager import AppointmentManager, InvalidPositionError, get_manager

MENU = """
##################################################

1. Create appointment
2. Today's appointments
3. Appointments of the next {week_days} days
4. All appointments
5. Delete appointment
6. Delete all appointments of a day
7. Delete all appointments
8. Save appointments
0. Quit"""

APPOINTMENT_TYPE_MENU = """
1. All-day appointment
2. Appointment with duration
0. Cancel"""

RECURRENCE_MENU = """
1. Once
2. Weekly
3. Yearly
0. Cancel"""

ONCE = "once"


@click.group(invoke_without_command=True)
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx, debug: bool):
    """Datebook - personal appointment calendar."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )
    ctx.obj = load_config()
    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


# ============== Shared helpers ==============


def _show_appointments(
    appointments: list[Appointment], as_json: bool = False, empty_msg: str = "No appointments found."
) -> None:
    """Shared appointment display logic."""
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": a.id,
                        "title": a.title,
                        "start": a.start.isoformat(),
                        "end": a.end.isoformat(),
                    }
                    for a in appointments
                ],
                indent=2,
            )
        )
        return

    if not appointments:
        click.echo(f"\n{empty_msg}")
        return

    click.echo("\nAppointments:")
    for number, appointment in enumerate(appointments, start=1):
        click.echo(appointment.format_line(number))


def _prompt_text(text: str) -> str:
    return click.prompt(text, default="", show_default=False)


def _prompt_int(text: str = "Enter the number to continue") -> int:
    """Prompt for an integer. Returns -1 for anything unparsable."""
    try:
        return int(_prompt_text(text).strip())
    except ValueError:
        return -1


def _confirmed(config: Config, text: str) -> bool:
    return _prompt_text(f'{text} Enter "{config.confirmation}" to confirm') == config.confirmation


def _choose(menu_text: str, options: dict):
    """Show a numbered menu until a valid choice. Returns None on cancel (0)."""
    while True:
        click.echo(menu_text)
        choice = _prompt_int()
        if choice == 0:
            click.echo("Cancelled.")
            return None
        if choice in options:
            return options[choice]
        click.echo("Invalid input.")


def _end_date_error(start: datetime, end: datetime, max_years: int) -> str | None:
    """Why an end date is unacceptable, or None if it is fine."""
    if end > add_years(start, max_years):
        return f"An appointment must not last longer than {max_years} year(s)."
    if end < start:
        return "The end date must not be before the start date."
    return None


def _save_or_exit(manager: AppointmentManager) -> None:
    if not manager.save():
        click.echo("Error: appointments could not be saved.", err=True)
        sys.exit(1)


# ============== Interactive menu ==============


@main.command()
@click.pass_obj
def menu(config: Config):
    """Run the interactive menu."""
    manager = get_manager(config)

    while True:
        click.echo(MENU.format(week_days=config.week_days))
        match _prompt_int():
            case 1:
                _create_interactive(manager, config)
            case 2:
                _show_appointments(manager.ongoing(1), empty_msg="No appointments today.")
            case 3:
                _show_appointments(
                    manager.ongoing(config.week_days),
                    empty_msg=f"No appointments in the next {config.week_days} days.",
                )
            case 4:
                _show_appointments(manager.appointments)
            case 5:
                _delete_by_number_interactive(manager, config)
            case 6:
                _delete_by_date_interactive(manager, config)
            case 7:
                _delete_all_interactive(manager, config)
            case 8:
                if manager.save():
                    click.echo("\nAppointments saved.")
                else:
                    click.echo("\nAppointments could not be saved.")
            case 0:
                return
            case _:
                click.echo("Invalid input.")


def _prompt_date(label: str, with_time: bool) -> datetime:
    date_format = DATETIME_FORMAT if with_time else DATE_FORMAT
    while True:
        parsed = parse_date(_prompt_text(f'{label} ("{date_format}")'), with_time=with_time)
        if parsed is not None:
            return parsed
        click.echo("Invalid input.")


def _create_interactive(manager: AppointmentManager, config: Config) -> None:
    has_duration = _choose(APPOINTMENT_TYPE_MENU, {1: False, 2: True})
    if has_duration is None:
        return

    recurrence = _choose(
        RECURRENCE_MENU,
        {1: ONCE, 2: RecurrenceKind.WEEKLY, 3: RecurrenceKind.YEARLY},
    )
    if recurrence is None:
        return

    count = 1
    if recurrence is not ONCE:
        count = _prompt_int("How many times should the appointment be created?")
        while count < 1:
            count = _prompt_int("How many times should the appointment be created?")

    title = _prompt_text("Title")
    start = _prompt_date("Start date", with_time=has_duration)

    if has_duration:
        while True:
            end = _prompt_date("End date", with_time=True)
            error = _end_date_error(start, end, config.max_duration_years)
            if error is None:
                break
            click.echo(error)
    else:
        end = end_of_day(start.date())

    if recurrence is ONCE:
        manager.create_single(title, start, end)
    else:
        manager.create_recurring(title, start, end, recurrence, count)
    click.echo("\nAppointment(s) created.")


def _delete_by_number_interactive(manager: AppointmentManager, config: Config) -> None:
    if not len(manager):
        click.echo("\nNo appointments found.")
        return

    _show_appointments(manager.appointments)
    number = _prompt_int("Enter the appointment number")
    try:
        _remove_by_index(manager, config, number - 1)
    except InvalidPositionError:
        click.echo("That appointment number does not exist.")


def _remove_by_index(manager: AppointmentManager, config: Config, index: int) -> None:
    series = manager.occurrences_of_series(index)

    if len(series) > 1:
        if _confirmed(config, "\nThis appointment has later occurrences. Delete them too?"):
            manager.delete_series_from(index)
            click.echo("\nThe appointment and all later occurrences were deleted.")
        else:
            manager.delete_at(index)
            click.echo("\nThe appointment was deleted.")
        return

    if _confirmed(config, "\nReally delete this appointment?"):
        manager.delete_at(index)
        click.echo("\nThe appointment was deleted.")
    else:
        click.echo("\nDeletion cancelled.")


def _delete_by_date_interactive(manager: AppointmentManager, config: Config) -> None:
    day = parse_date(_prompt_text(f'Date ("{DATE_FORMAT}")'))
    if day is None:
        click.echo("Invalid input.")
        return

    if not manager.has_appointments_on(day.date()):
        click.echo("\nNo appointments found.")
        return

    if _confirmed(config, "\nFound one or more appointments."):
        manager.delete_on_date(day.date())
        click.echo("\nThe appointments were deleted.")
    else:
        click.echo("\nDeletion cancelled.")


def _delete_all_interactive(manager: AppointmentManager, config: Config) -> None:
    if not len(manager):
        click.echo("\nNo appointments found.")
        return

    if _confirmed(config, "\nReally delete all appointments?"):
        manager.delete_all()
        click.echo("\nAll appointments were deleted.")
    else:
        click.echo("\nDeletion cancelled.")


# ============== One-shot commands ==============


@main.command("list")
@click.option("--today", is_flag=True, help="Only today's appointments")
@click.option("--days", type=int, default=None, help="Only appointments of the next N days")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_obj
def list_cmd(config: Config, today: bool, days: int | None, as_json: bool):
    """List appointments."""
    manager = get_manager(config)

    if today:
        _show_appointments(manager.ongoing(1), as_json, "No appointments today.")
    elif days is not None:
        _show_appointments(manager.ongoing(days), as_json, f"No appointments in the next {days} days.")
    else:
        _show_appointments(manager.appointments, as_json)


@main.command()
@click.argument("title")
@click.option("--start", "start_text", required=True, help=f'Start, "{DATETIME_FORMAT}" ("{DATE_FORMAT}" with --all-day)')
@click.option("--end", "end_text", default=None, help=f'End, "{DATETIME_FORMAT}"')
@click.option("--all-day", is_flag=True, help="Appointment lasts the whole start day")
@click.option("--repeat", type=click.Choice([k.value for k in RecurrenceKind]), default=None, help="Recurrence")
@click.option("--count", type=click.IntRange(min=1), default=1, help="Number of occurrences")
@click.pass_obj
def add(
    config: Config,
    title: str,
    start_text: str,
    end_text: str | None,
    all_day: bool,
    repeat: str | None,
    count: int,
):
    """Create an appointment and save."""
    start = parse_date(start_text, with_time=not all_day)
    if start is None:
        click.echo(f"Error: invalid start date {start_text!r}", err=True)
        sys.exit(1)

    if all_day:
        end = end_of_day(start.date())
    else:
        end = parse_date(end_text or "", with_time=True)
        if end is None:
            click.echo(f"Error: invalid or missing end date {end_text!r}", err=True)
            sys.exit(1)
        error = _end_date_error(start, end, config.max_duration_years)
        if error:
            click.echo(f"Error: {error}", err=True)
            sys.exit(1)

    manager = get_manager(config)
    if repeat:
        created = manager.create_recurring(title, start, end, RecurrenceKind(repeat), count)
    else:
        created = [manager.create_single(title, start, end)]
    _save_or_exit(manager)
    click.echo(f"Created {len(created)} appointment(s).")


@main.command()
@click.argument("number", type=int)
@click.option("--series", is_flag=True, help="Also delete later occurrences of the series")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_obj
def delete(config: Config, number: int, series: bool, yes: bool):
    """Delete appointment NUMBER (as shown by 'list') and save."""
    manager = get_manager(config)
    index = number - 1

    try:
        targets = manager.occurrences_of_series(index) if series else [manager.get(index)]
    except InvalidPositionError:
        click.echo(f"Error: appointment {number} does not exist.", err=True)
        sys.exit(1)

    if not yes and not click.confirm(f"Delete {len(targets)} appointment(s)?"):
        return

    if series:
        manager.delete_series_from(index)
    else:
        manager.delete_at(index)
    _save_or_exit(manager)
    click.echo(f"Deleted {len(targets)} appointment(s).")


@main.command("clear-day")
@click.argument("day_text", metavar="DATE")
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_obj
def clear_day(config: Config, day_text: str, yes: bool):
    """Delete every appointment starting on DATE and save."""
    day = parse_date(day_text)
    if day is None:
        click.echo(f'Error: invalid date {day_text!r}, expected "{DATE_FORMAT}"', err=True)
        sys.exit(1)

    manager = get_manager(config)
    if not manager.has_appointments_on(day.date()):
        click.echo("No appointments found.")
        return

    if not yes and not click.confirm(f"Delete all appointments on {day_text}?"):
        return

    removed = manager.delete_on_date(day.date())
    _save_or_exit(manager)
    click.echo(f"Deleted {removed} appointment(s).")


@main.command()
@click.option("--yes", is_flag=True, help="Don't ask for confirmation")
@click.pass_obj
def clear(config: Config, yes: bool):
    """Delete all appointments and save."""
    manager = get_manager(config)
    if not len(manager):
        click.echo("No appointments found.")
        return

    if not yes and not click.confirm("Really delete all appointments?"):
        return

    manager.delete_all()
    _save_or_exit(manager)
    click.echo("All appointments were deleted.")


if __name__ == "__main__":
    main()
