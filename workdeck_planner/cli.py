"""
Workdeck Planner CLI — Launch the dashboard and manage the API token.

Commands:
- workdeck-planner run            — Start the Reflex dev server
- workdeck-planner token set      — Store the bearer token (prompted if not given)
- workdeck-planner token show     — Print the stored token, masked
- workdeck-planner token clear    — Remove the stored token
- workdeck-planner summary        — Load the team and print utilization per member
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from typing import Optional

from workdeck_planner.engine.errors import ConfigError

logger = logging.getLogger("workdeck_planner.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="workdeck-planner",
        description="Workdeck Resource Planner — team capacity dashboard",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # workdeck-planner run
    run_parser = subparsers.add_parser("run", help="Start the Reflex dev server")
    run_parser.add_argument("--host", default="0.0.0.0", help="Backend host to bind (default: 0.0.0.0)")
    run_parser.add_argument("--port", type=int, default=3000, help="Frontend port (default: 3000)")
    run_parser.add_argument("--backend-port", type=int, default=8000, help="Backend port (default: 8000)")
    run_parser.add_argument("--env", choices=["dev", "prod"], default="dev", help="Environment (default: dev)")

    # workdeck-planner token {set,show,clear}
    token_parser = subparsers.add_parser("token", help="Manage the stored Workdeck token")
    token_parser.add_argument(
        "action", choices=["set", "show", "clear"], help="set, show or clear the token"
    )
    token_parser.add_argument("--token", help="Token value for 'set' (prompted if not provided)")
    token_parser.add_argument(
        "--config", default=None, help="Path to workdeck.yaml (default: auto-discover)"
    )

    # workdeck-planner summary
    summary_parser = subparsers.add_parser("summary", help="Print team utilization")
    summary_parser.add_argument("--department", help="Only show members of this department")
    summary_parser.add_argument(
        "--config", default=None, help="Path to workdeck.yaml (default: auto-discover)"
    )

    args = parser.parse_args(argv)

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "token":
        return cmd_token(args)
    elif args.command == "summary":
        return cmd_summary(args)
    else:
        parser.print_help()
        return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Start the Reflex dev server."""
    import subprocess

    print("Starting Workdeck Resource Planner (Reflex) server...")
    try:
        cmd = [
            "reflex", "run",
            "--backend-host", args.host,
            "--frontend-port", str(args.port),
            "--backend-port", str(args.backend_port),
            "--env", args.env,
        ]
        result = subprocess.run(cmd, check=True)
        return result.returncode
    except FileNotFoundError:
        print("[ERROR] 'reflex' command not found. Install: pip install reflex")
        return 1
    except subprocess.CalledProcessError as e:
        print(f"[ERROR] Reflex exited with status {e.returncode}")
        return e.returncode
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0


def _load_config(config_path: Optional[str]):
    from workdeck_planner.engine.config import load_config

    try:
        return load_config(config_path)
    except ConfigError as e:
        print(f"[ERROR] {e.message}")
        return None


def _token_store(config):
    from workdeck_planner.engine.token_store import TokenStore

    return TokenStore(config.token.resolved_path, key=config.token.key)


def cmd_token(args: argparse.Namespace) -> int:
    """Set, show or clear the stored bearer token."""
    from workdeck_planner.engine.token_store import mask_token

    config = _load_config(args.config)
    if config is None:
        return 1
    store = _token_store(config)

    if args.action == "set":
        token = args.token or getpass.getpass("  Enter Workdeck bearer token: ")
        try:
            store.save(token)
        except ValueError as e:
            print(f"[ERROR] {e}")
            return 1
        print(f"[OK] Token stored in {store.path}")
        return 0

    if args.action == "show":
        print(f"{store.key}: {mask_token(store.load())}")
        return 0

    if store.clear():
        print("[OK] Token cleared")
    else:
        print("[WARN] No token stored")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    """Load the dashboard once and print one line per team member."""
    from workdeck_planner.client import WorkdeckClient
    from workdeck_planner.controller import DashboardController, LoadPhase, utilization_level
    from workdeck_planner.engine.logging import init_logging

    config = _load_config(args.config)
    if config is None:
        return 1

    file_logger = None
    if config.logging.enabled:
        file_logger = init_logging(log_dir=config.logging.directory, level=config.logging.level)

    controller = DashboardController(
        client_factory=lambda token: WorkdeckClient.from_config(token, config.api, file_logger=file_logger),
        token_store=_token_store(config),
        file_logger=file_logger,
    )

    phase = asyncio.run(controller.start())
    if phase == LoadPhase.AWAITING_TOKEN:
        print(f"[ERROR] {controller.error}")
        print("  Run: workdeck-planner token set")
        return 1
    if phase == LoadPhase.FAILED:
        print(f"[ERROR] {controller.error}")
        return 1

    if args.department:
        controller.set_department(args.department)

    members = controller.visible_members
    print("=" * 60)
    print(f"  {config.name} — {controller.date_range_label()}")
    print("=" * 60)
    if not members:
        print("  No team members found.")
        return 0

    for member in members:
        flag = {"over": " !", "high": " ^"}.get(utilization_level(member.utilization), "")
        print(
            f"  {member.name:<28} {member.department:<16} "
            f"{member.scheduled:>6.1f}h / {member.capacity:>5.1f}h  {member.utilization:>4d}%{flag}"
        )
        for task in member.tasks:
            print(f"      - {task.project} ({task.target_hours_per_week}h/week, {task.duration})")
    print(f"\n  {len(members)} member(s), last sync {controller.last_sync:%Y-%m-%d %H:%M:%S}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
