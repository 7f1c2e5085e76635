"""Operator console for MemberAuth accounts.

    memberauth-admin list
    memberauth-admin create-admin
    memberauth-admin set-role alice@example.com admin
"""

import argparse
import sys
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

from .app import MemberAuthApp
from .auth.validation import SignupForm, validate
from .models.user import ROLES, User
from .utils.exceptions import MemberAuthError

console = Console()


def _users_table(app: MemberAuthApp) -> Table:
    table = Table(title="Users", box=box.ROUNDED, show_header=True)
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Created")
    for u in app.auth.list_users():
        role = f"[bold magenta]{u.role}[/bold magenta]" if u.role == "admin" else u.role
        table.add_row(u.name, u.email, role, u.created_at)
    return table


def cmd_list(app: MemberAuthApp, args: argparse.Namespace) -> int:
    console.print(_users_table(app))
    return 0


def cmd_create_admin(app: MemberAuthApp, args: argparse.Namespace) -> int:
    name = args.name or Prompt.ask("Name", default="Admin")
    email = args.email or Prompt.ask("Email")
    password = Prompt.ask("Password", password=True)
    repeat = Prompt.ask("Repeat password", password=True)
    if password != repeat:
        console.print("[bold red]✗ Passwords do not match[/bold red]")
        return 1

    form = validate(
        SignupForm,
        {"name": name, "email": email, "password": password},
        min_password_length=app.settings.security.min_password_length,
    )
    admin = User(
        name=form.name,
        email=str(form.email),
        password_hash=app.hasher.hash(form.password),
        role="admin",
    )
    app.users.insert(admin)
    console.print(f"[bold green]✓ Admin created:[/bold green] {admin.email}")
    return 0


def cmd_set_role(app: MemberAuthApp, args: argparse.Namespace) -> int:
    # Operator action outside HTTP; no actor session involved
    updated = app.users.update_role(args.email.strip().lower(), args.role)
    console.print(f"[bold green]✓ {updated.email} is now {updated.role}[/bold green]")
    console.print("[yellow]Existing sessions keep their old role until the user logs in again.[/yellow]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memberauth-admin", description="Manage MemberAuth accounts")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List all users").set_defaults(func=cmd_list)

    create = sub.add_parser("create-admin", help="Create an admin account")
    create.add_argument("--name")
    create.add_argument("--email")
    create.set_defaults(func=cmd_create_admin)

    set_role = sub.add_parser("set-role", help="Promote or demote an account")
    set_role.add_argument("email")
    set_role.add_argument("role", choices=ROLES)
    set_role.set_defaults(func=cmd_set_role)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    app = MemberAuthApp()
    app.data_dir.mkdir(parents=True, exist_ok=True)
    try:
        return args.func(app, args)
    except MemberAuthError as e:
        console.print(f"[bold red]✗ {e}[/bold red]")
        return 1


if __name__ == "__main__":
    sys.exit(main())
