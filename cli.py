# cli.py
import argparse
import sys

import codec
import config
from errors import TrackerError
from logging_setup import configure_logging
from models import CATEGORIES
from session import Session
from storage import FileStore


def ask(message: str) -> bool:
    return input(f"{message} [y/N] ").strip().lower() in ("y", "yes")


def open_session(args) -> Session:
    confirm = (lambda message: True) if getattr(args, "yes", False) else ask
    return Session(FileStore(args.data_dir), confirm=confirm)


def require_project(session: Session):
    if session.current_project is None:
        raise LookupError("No tracker yet. Create one with: new NAME")
    return session.current_project


def cmd_projects(session, args):
    if not session.projects:
        print("No trackers yet.")
        return
    for p in session.projects:
        marker = "*" if p.id == session.state.current_project_id else " "
        print(f"{marker} {p.id}  {p.name}  ({len(p.expenses)} expenses)")


def cmd_new(session, args):
    if not session.create_project(args.name):
        raise ValueError("Tracker name must not be empty.")
    print(f"Created: {session.current_project.id}")


def cmd_rename(session, args):
    if not session.rename_project(args.id, args.name.strip()):
        raise LookupError(f"No tracker {args.id}")


def cmd_delete(session, args):
    if session.state.find(args.id) is None:
        raise LookupError(f"No tracker {args.id}")
    if session.delete_project(args.id):
        print(f"Deleted: {args.id}")


def cmd_use(session, args):
    if session.state.find(args.id) is None:
        raise LookupError(f"No tracker {args.id}")
    session.select_project(args.id)


def cmd_add(session, args):
    require_project(session)
    exp = session.submit_expense(args.amount, args.category, args.description, args.date)
    print(f"Saved: {exp.id}")


def cmd_edit(session, args):
    require_project(session)
    old = session.start_edit(args.expense_id)
    exp = session.submit_expense(
        args.amount if args.amount is not None else old.amount,
        args.category or old.category,
        args.description if args.description is not None else old.description,
        args.date or old.date,
    )
    print(f"Updated: {exp.id}")


def cmd_rm(session, args):
    require_project(session)
    if session.current_project.find_expense(args.expense_id) is None:
        raise LookupError(f"No expense {args.expense_id}")
    if session.delete_expense(args.expense_id):
        print(f"Deleted: {args.expense_id}")


def cmd_months(session, args):
    for m in session.months():
        print(m)


def cmd_show(session, args):
    project = require_project(session)
    if args.month:
        session.select_month(args.month)
    summary = session.summary()
    print(f"{project.name} {summary.month}")
    print(f"Total: {config.CURRENCY} {summary.total:.2f}")
    for cat, amount in summary.by_category.items():
        print(f"  {cat:<14}{amount:>10.2f}")
    visible = session.visible_expenses()
    if not visible:
        print("No expenses this month.")
    for e in visible:
        print(f"{e.id}  {e.date.isoformat()}  {config.CURRENCY} {e.amount:.2f} - {e.category}  {e.description}")
    if args.chart:
        import matplotlib.pyplot as plt
        from viz import plot_category_pie
        plot_category_pie(summary)
        plt.show()


def cmd_export(session, args):
    project = require_project(session)
    text = session.export(args.format)
    if args.output == "-":
        sys.stdout.write(text + "\n")
        return
    path = args.output or codec.export_filename(project.name, args.format)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    print(f"Exported {len(project.expenses)} expenses to {path}")


def cmd_import(session, args):
    require_project(session)
    n = session.import_file(args.path, args.format)
    print(f"Imported {n} expenses into {session.current_project.name}")


COMMANDS = {
    "projects": cmd_projects,
    "new": cmd_new,
    "rename": cmd_rename,
    "delete": cmd_delete,
    "use": cmd_use,
    "add": cmd_add,
    "edit": cmd_edit,
    "rm": cmd_rm,
    "months": cmd_months,
    "show": cmd_show,
    "export": cmd_export,
    "import": cmd_import,
}


def build_parser():
    p = argparse.ArgumentParser("expenses")
    p.add_argument("--data-dir", default=config.DATA_DIR, help="Where trackers are stored")
    p.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING...")
    sub = p.add_subparsers(dest="cmd")
    sub.add_parser("projects", help="List trackers")
    n = sub.add_parser("new", help="Add a tracker and make it current")
    n.add_argument("name")
    r = sub.add_parser("rename")
    r.add_argument("id")
    r.add_argument("name")
    d = sub.add_parser("delete", help="Delete a tracker and all its expenses")
    d.add_argument("id")
    d.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    u = sub.add_parser("use", help="Switch the current tracker")
    u.add_argument("id")
    a = sub.add_parser("add")
    a.add_argument("amount", help="Amount, e.g. 12.50")
    a.add_argument("category", choices=CATEGORIES)
    a.add_argument("--description", default="")
    a.add_argument("--date", default=None, help="YYYY-MM-DD, defaults to today")
    e = sub.add_parser("edit")
    e.add_argument("expense_id")
    e.add_argument("--amount", default=None)
    e.add_argument("--category", choices=CATEGORIES, default=None)
    e.add_argument("--description", default=None)
    e.add_argument("--date", default=None)
    rm = sub.add_parser("rm", help="Delete an expense")
    rm.add_argument("expense_id")
    rm.add_argument("--yes", action="store_true")
    sub.add_parser("months", help="List months that have expenses")
    s = sub.add_parser("show", help="Month summary and expense list")
    s.add_argument("--month", default=None, help="YYYY-MM, defaults to this month")
    s.add_argument("--chart", action="store_true", help="Show the category pie")
    x = sub.add_parser("export")
    x.add_argument("format", choices=codec.FORMATS)
    x.add_argument("--output", "-o", default=None, help="File path, or - for stdout")
    i = sub.add_parser("import", help="Replace the current tracker's expenses")
    i.add_argument("path")
    i.add_argument("--format", choices=codec.FORMATS, default=None)
    return p


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.cmd is None:
        parser.print_help()
        return 0
    configure_logging(args.log_level)
    session = open_session(args)
    try:
        COMMANDS[args.cmd](session, args)
    except (TrackerError, LookupError, ValueError, OSError) as e:
        msg = e.args[0] if isinstance(e, KeyError) and e.args else e
        print(f"Error: {msg}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
