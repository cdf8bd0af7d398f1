# src/ticket_desk/scripts/admin.py
"""
Command-line administration for a Ticket Desk database.

Covers the same operations as the desktop shell's settings page:
1. Register, list and delete devices
2. Manage announcements
3. Inspect and reset the counter, close desks
4. Print recent history and per-desk statistics
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ticket_desk.core.settings import settings
from ticket_desk.db.session import SessionLocal, init_db
from ticket_desk.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from ticket_desk.services import announcements as announcement_service
from ticket_desk.services import devices as device_service
from ticket_desk.services.analytics import get_session_analyzer
from ticket_desk.services.ledger import get_ledger


def _format_minutes(value: float | None) -> str:
    return "-" if value is None else f"{value:.1f} min"


def cmd_register(db: Session, args: argparse.Namespace) -> int:
    token = device_service.register_device(db, args.name)
    if token is None:
        print(f"Device {args.name!r} already exists; token unchanged")
    else:
        print(f"Registered {args.name!r} with token {token}")
    return 0


def cmd_devices(db: Session, args: argparse.Namespace) -> int:
    for device in device_service.list_devices(db):
        print(f"{device.id:>4}  {device.name:<20} {device.token}")
    return 0


def cmd_delete_device(db: Session, args: argparse.Namespace) -> int:
    if not device_service.delete_device(db, args.id):
        print(f"No device with id {args.id}")
        return 1
    print(f"Deleted device {args.id}")
    return 0


def cmd_announcements(db: Session, args: argparse.Namespace) -> int:
    if args.action == "add":
        try:
            data = AnnouncementCreate(message=" ".join(args.values))
        except ValidationError:
            print("'add' needs a message")
            return 2
        announcement = announcement_service.add_announcement(db, data.message)
        print(f"Added announcement {announcement.id}")
        return 0

    if args.action == "list":
        for item in announcement_service.list_announcements(db):
            flag = "on " if item.active else "off"
            print(f"{item.id:>4}  [{flag}] {item.message}")
        return 0

    if not args.values or not args.values[0].isdigit():
        print(f"'{args.action}' needs an announcement id")
        return 2
    announcement = announcement_service.get_announcement(db, int(args.values[0]))
    if announcement is None:
        print(f"No announcement with id {args.values[0]}")
        return 1

    if args.action == "delete":
        announcement_service.delete_announcement(db, announcement)
    elif args.action == "edit":
        try:
            update = AnnouncementUpdate(message=" ".join(args.values[1:]))
        except ValidationError:
            print("'edit' needs an announcement id and a message")
            return 2
        announcement_service.update_announcement(db, announcement, update)
    else:
        announcement_service.set_announcement_active(db, announcement, args.action == "enable")
    print(f"Announcement {args.values[0]}: {args.action} done")
    return 0


def cmd_current(db: Session, args: argparse.Namespace) -> int:
    snapshot = get_ledger().current()
    print(f"Ticket {snapshot.counter} at {snapshot.desk_name}")
    return 0


def cmd_reset(db: Session, args: argparse.Namespace) -> int:
    get_ledger().reset_all()
    print("Counter reset; new session started")
    return 0


def cmd_close(db: Session, args: argparse.Namespace) -> int:
    outcome = get_ledger().close_desk(args.desk)
    print(f"{args.desk}: {outcome.value}")
    return 0


def cmd_history(db: Session, args: argparse.Namespace) -> int:
    for item in get_session_analyzer().recent_history(args.limit):
        print(f"{item.created_at:%H:%M:%S}  #{item.ticket_number:<5} {item.desk_name}")
    return 0


def cmd_stats(db: Session, args: argparse.Namespace) -> int:
    analyzer = get_session_analyzer()
    desks = [args.desk] if args.desk else analyzer.desk_names()
    for desk in desks:
        print(f"== {desk}")
        for row in analyzer.desk_statistics(desk):
            end = f"{row.end_time:%H:%M:%S}" if row.end_time else "--:--:--"
            print(
                f"  #{row.ticket_number:<5} {row.start_time:%H:%M:%S} -> {end}"
                f"  {_format_minutes(row.duration_minutes)}"
            )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Ticket Desk administration")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("register", help="register a button or screen")
    p.add_argument("name")
    p.set_defaults(handler=cmd_register)

    sub.add_parser("devices", help="list devices and tokens").set_defaults(handler=cmd_devices)

    p = sub.add_parser("delete-device", help="delete a device by id")
    p.add_argument("id", type=int)
    p.set_defaults(handler=cmd_delete_device)

    p = sub.add_parser("announcements", help="manage display announcements")
    p.add_argument("action", choices=["list", "add", "edit", "enable", "disable", "delete"])
    p.add_argument("values", nargs="*", help="id and/or message, depending on the action")
    p.set_defaults(handler=cmd_announcements)

    sub.add_parser("current", help="show the displayed ticket").set_defaults(handler=cmd_current)
    sub.add_parser("reset", help="reset the counter").set_defaults(handler=cmd_reset)

    p = sub.add_parser("close", help="close a desk")
    p.add_argument("desk")
    p.set_defaults(handler=cmd_close)

    p = sub.add_parser("history", help="recent tickets of this session")
    p.add_argument("--limit", type=int, default=settings.recent_history_limit)
    p.set_defaults(handler=cmd_history)

    p = sub.add_parser("stats", help="per-ticket durations")
    p.add_argument("desk", nargs="?")
    p.set_defaults(handler=cmd_stats)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else settings.log_level.upper())

    init_db()
    db = SessionLocal()
    try:
        return int(args.handler(db, args))
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
