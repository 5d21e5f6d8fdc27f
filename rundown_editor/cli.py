"""rundown-editor CLI entry point."""
from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import List, Optional

from rundown_api.credentials import CredentialStore
from rundown_api.errors import ApiError
from rundown_editor.app import build_controller
from rundown_editor.config import load_config
from rundown_editor.controller import RundownController
from rundown_editor.errors import ConfigurationError, RundownValidationError
from rundown_editor.logging_config import setup_logging
from rundown_editor.models import CreateRundownForm
from rundown_editor.notify import ConsoleNotifier
from rundown_editor.timecode import TimeFormatError, format_time, parse_time_strict


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rundown-editor",
        description="Rundown editor: plan timed show segments, talent and stories",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    token_parser = sub.add_parser("set-token", help="Store the API bearer token")
    token_parser.add_argument("token", help="Bearer token issued by the rundown API")

    sub.add_parser("list", help="List rundowns")

    show_parser = sub.add_parser("show", help="Show a rundown with segments, talent and stories")
    show_parser.add_argument("rundown_id")

    timing_parser = sub.add_parser("timing", help="Show total runtime against the target")
    timing_parser.add_argument("rundown_id")

    create_parser = sub.add_parser("create", help="Create a rundown")
    create_parser.add_argument("--name", required=True, help="Show name")
    create_parser.add_argument(
        "--air-date", default=None, metavar="YYYY-MM-DD",
        help="Air date (default: today)",
    )
    create_parser.add_argument("--target", default="20:00", metavar="MM:SS", help="Target duration")
    create_parser.add_argument("--class-id", type=int, default=None)
    create_parser.add_argument("--share", action="store_true", help="Share with the class")

    add_parser = sub.add_parser("add-segment", help="Append a segment to a rundown")
    add_parser.add_argument("rundown_id")
    add_parser.add_argument("--title", required=True)
    add_parser.add_argument("--duration", default="00:00", metavar="MM:SS")
    add_parser.add_argument("--notes", default="")
    add_parser.add_argument("--type", dest="segment_type", default="custom")
    add_parser.add_argument("--after", default=None, metavar="SEGMENT_ID",
                            help="Insert after this segment instead of at the end")

    move_parser = sub.add_parser("move-segment", help="Move a segment to a new position")
    move_parser.add_argument("rundown_id")
    move_parser.add_argument("from_index", type=int)
    move_parser.add_argument("to_index", type=int)

    status_parser = sub.add_parser("status", help="Cycle the review status of a rundown or segment")
    status_parser.add_argument("rundown_id")
    status_parser.add_argument("--segment", default=None, metavar="SEGMENT_ID")
    status_parser.add_argument("--prev", action="store_true", help="Cycle backwards")

    search_parser = sub.add_parser("search-stories", help="Search the story catalog")
    search_parser.add_argument("rundown_id")
    search_parser.add_argument("term", nargs="?", default="")

    attach_parser = sub.add_parser("attach-story", help="Attach a story to a rundown")
    attach_parser.add_argument("rundown_id")
    attach_parser.add_argument("story_id")
    attach_parser.add_argument("--segment", default=None, metavar="SEGMENT_ID")
    attach_parser.add_argument("--notes", default="")

    detach_parser = sub.add_parser("detach-story", help="Remove a story from a rundown")
    detach_parser.add_argument("rundown_id")
    detach_parser.add_argument("integration_id")
    detach_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    export_parser = sub.add_parser("export-pdf", help="Download the rundown as PDF")
    export_parser.add_argument("rundown_id")
    export_parser.add_argument("--output", required=True, metavar="rundown.pdf")
    return parser


def _login_required() -> None:
    print("ERROR: Session expired or not logged in. Run 'rundown-editor set-token <TOKEN>'.")
    sys.exit(1)


def _prompt_confirm(message: str) -> bool:
    answer = input(f"{message} [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _print_rundown(controller: RundownController) -> None:
    state = controller.state
    rundown = state.current
    air_date = rundown.air_date.isoformat() if rundown.air_date else "-"
    print(f"{rundown.show_name}  [{rundown.status.value}]  airs {air_date}")
    for seg in state.segments:
        pin = "*" if seg.pinned else " "
        print(f"{seg.ordinal:>3} {pin} {format_time(seg.duration)}  {seg.title}"
              f"  [{seg.status.value}]  id={seg.id}")
    if state.talent.hosts or state.talent.guests:
        print("Hosts:  " + ", ".join(t.name for t in state.talent.hosts))
        print("Guests: " + ", ".join(t.name for t in state.talent.guests))
    for story in state.stories:
        print(f"Story {story.id}: {story.title or story.story_id}")
    _print_timing(controller)


def _print_timing(controller: RundownController) -> None:
    timing = controller.state.timing
    print(f"Total {format_time(timing.total_seconds)} / "
          f"target {format_time(timing.target_seconds)}: {timing.label}")


def _ident(text: Optional[str]):
    """Numeric ids travel as integers in request bodies."""
    if text is None:
        return None
    return int(text) if text.isdigit() else text


def _parse_air_date(text: Optional[str]) -> date:
    if text is None:
        return date.today()
    try:
        return date.fromisoformat(text)
    except ValueError:
        raise RundownValidationError(f"Invalid air date {text!r}; use YYYY-MM-DD") from None


def _run(args: argparse.Namespace, controller: RundownController, notifier: ConsoleNotifier) -> bool:
    if args.command == "list":
        for r in controller.list_rundowns():
            air_date = r.air_date.isoformat() if r.air_date else "-"
            print(f"{r.id}\t{air_date}\t{r.status.value}\t{r.show_name}")
        return True

    if args.command == "create":
        try:
            form = CreateRundownForm(
                show_name=args.name,
                air_date=_parse_air_date(args.air_date),
                target_duration=parse_time_strict(args.target),
                class_id=args.class_id,
                share_with_class=args.share,
            )
        except RundownValidationError as exc:
            notifier.error(str(exc))
            return False
        created = controller.create_rundown(form)
        print(created.id)
        return True

    if args.command == "export-pdf":
        controller.export_pdf(args.output, rundown_id=args.rundown_id)
        return True

    if args.command == "detach-story":
        if args.yes:
            controller.stories.confirm = lambda _message: True
        controller.select_rundown(args.rundown_id)
        return controller.detach_story(args.integration_id)

    controller.select_rundown(args.rundown_id)

    if args.command == "show":
        _print_rundown(controller)
        return True
    if args.command == "timing":
        _print_timing(controller)
        return True
    if args.command == "search-stories":
        for story in controller.search_stories(args.term):
            marker = " (in rundown)" if story.already_in_rundown else ""
            print(f"{story.id}\t{story.title}{marker}")
        return True
    if args.command == "attach-story":
        return controller.attach_story(_ident(args.story_id), _ident(args.segment), args.notes) is not None

    # the remaining commands edit the rundown and save explicitly
    if args.command == "add-segment":
        try:
            duration = parse_time_strict(args.duration)
        except TimeFormatError as exc:
            notifier.error(str(exc))
            return False
        seg = controller.add_segment(
            args.title, duration, args.notes, args.segment_type, after_segment_id=_ident(args.after)
        )
        controller.save()
        print(seg.id)
    elif args.command == "move-segment":
        controller.move_segment(args.from_index, args.to_index)
        controller.save()
    elif args.command == "status":
        direction = -1 if args.prev else 1
        if args.segment is not None:
            seg = controller.cycle_segment_status(args.segment, direction)
            controller.save()
            print(seg.status.value)
        else:
            rundown = controller.cycle_status(direction)
            controller.save()
            print(rundown.status.value)
    return True


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
    except ConfigurationError as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)
    setup_logging(config.log_level, config.log_file)

    if args.command == "set-token":
        store = CredentialStore(config.credentials_path)
        try:
            store.save_token(args.token.strip())
        except ValueError as exc:
            print(f"ERROR: {exc}")
            sys.exit(1)
        print(f"OK: token saved to {store.path}")
        sys.exit(0)

    notifier = ConsoleNotifier()
    controller = build_controller(
        config, notifier, _prompt_confirm, on_unauthorized=_login_required
    )
    try:
        ok = _run(args, controller, notifier)
    except (ApiError, RundownValidationError):
        # already reported through the notifier
        sys.exit(1)
    finally:
        controller.close()
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
