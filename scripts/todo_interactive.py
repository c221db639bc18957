#!/usr/bin/env python3
# =============================================================================
# scripts/todo_interactive.py - Interactive Todo Client
# =============================================================================
# A terminal front-end for the todo list. Drives the same controller as the
# HTTP API, with one Supabase session for the lifetime of the script.
#
# Usage:
#   python scripts/todo_interactive.py
#
# Commands:
#   /signup <email> <password>  - Create an account (confirm by email)
#   /signin <email> <password>  - Sign in
#   /signout                    - Sign out
#   /add <task> [@image-path]   - Add a todo, optionally with an image
#   /toggle <n>                 - Toggle todo number n from /list
#   /list                       - Show todos
#   /help                       - Show help
#   /quit or /exit              - Exit
#
# Any other line is added as a todo when signed in.
# =============================================================================

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

# Check for Supabase settings
if not os.getenv("SUPABASE_URL") or not os.getenv("SUPABASE_ANON_KEY"):
    print("ERROR: SUPABASE_URL / SUPABASE_ANON_KEY not found in environment")
    print("Please set them in your .env file or environment")
    sys.exit(1)

from app.config import settings
from app.exceptions import TodoAppException
from core.controller import TodoAppController
from core.models.draft import ImageFile
from core.models.state import AddStatus, AppState

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def alert(message):
    """Blocking notification: the user has to acknowledge it."""
    print("\n" + "!" * 50)
    print(f"  {message}")
    print("!" * 50)
    try:
        input("  Press Enter to continue...")
    except EOFError:
        pass


def print_state(state: AppState):
    """Print either the sign-in prompt or the todo list."""
    print("\n" + "=" * 50)
    if state.user is None:
        print("  Supabase Todos")
        print("=" * 50)
        print("  Not signed in. Use /signin or /signup.")
        print()
        return

    print(f"  My Todos ({state.user.email})")
    print("=" * 50)
    if not state.todos:
        print("  No todos yet! Add one with /add")
    for i, todo in enumerate(state.todos, 1):
        box = "[x]" if todo.is_complete else "[ ]"
        image = "  (image)" if todo.image_url else ""
        print(f"  {i:>2}. {box} {todo.task}{image}")
    print()


def print_help():
    """Print help message."""
    print("\n" + "-" * 40)
    print("COMMANDS:")
    print("  /signup <email> <password>")
    print("  /signin <email> <password>")
    print("  /signout")
    print("  /add <task> [@image-path]")
    print("  /toggle <n>")
    print("  /list")
    print("  /quit")
    print("-" * 40 + "\n")


def parse_add(args):
    """Split '/add' arguments into task text and an optional image path."""
    words = args.split()
    image_path = None
    if words and words[-1].startswith("@"):
        image_path = words.pop()[1:]
    return " ".join(words), image_path


def handle_add(controller: TodoAppController, args):
    task, image_path = parse_add(args)
    controller.set_draft_task(task)

    if image_path:
        try:
            controller.select_image(ImageFile.from_path(image_path))
        except OSError as e:
            alert(f"Cannot read {image_path}: {e.strerror or e}")
            return

    result = controller.add()
    if result.status != AddStatus.ADDED:
        # Each /add names its own image, so a failed one is not carried over
        controller.clear_image()

    if result.status == AddStatus.ADDED:
        print(f"  Added: {result.todo.task}")
    elif result.status == AddStatus.SKIPPED:
        print("  Nothing to add: the task is empty.")
    elif result.status == AddStatus.BUSY:
        print("  Still adding the previous todo...")
    elif result.error is not None:
        alert(result.error.message)


def handle_toggle(controller: TodoAppController, args):
    todos = controller.snapshot().todos
    try:
        index = int(args) - 1
        if index < 0:
            raise IndexError(index)
        todo = todos[index]
    except (ValueError, IndexError):
        print(f"  No todo number '{args}'. Use /list to see numbers.")
        return

    if not controller.toggle(todo.id, todo.is_complete):
        print("  Could not update that todo (see log).")


def run(controller: TodoAppController):
    print_state(controller.snapshot())
    print_help()

    while True:
        try:
            line = input("todo> ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break

        if not line:
            continue

        command, _, args = line.partition(" ")
        args = args.strip()

        try:
            if command in ("/quit", "/exit"):
                break
            elif command == "/help":
                print_help()
            elif command == "/list":
                print_state(controller.snapshot())
            elif command in ("/signup", "/signin"):
                parts = args.split()
                if len(parts) != 2:
                    print(f"  Usage: {command} <email> <password>")
                    continue
                if command == "/signup":
                    alert(controller.register(parts[0], parts[1], redirect_to=settings.EMAIL_REDIRECT_URL))
                else:
                    print_state(controller.authenticate(parts[0], parts[1]))
            elif command == "/signout":
                print_state(controller.deauthenticate())
            elif controller.user is None:
                print("  Sign in first (/signin <email> <password>).")
            elif command == "/add":
                handle_add(controller, args)
            elif command == "/toggle":
                handle_toggle(controller, args)
                print_state(controller.snapshot())
            elif command.startswith("/"):
                print(f"  Unknown command {command}. Type /help.")
            else:
                handle_add(controller, line)
        except TodoAppException as e:
            alert(e.message)


def main():
    with TodoAppController.from_settings(settings) as controller:
        run(controller)
    print("Bye!")


if __name__ == "__main__":
    main()
