"""
Command-line client for suggestion-board.

Usage:
    suggestion-board [OPTIONS] COMMAND

    # Show the feed, most popular first
    suggestion-board list --sort popular

    # Like a suggestion (run again to unlike)
    suggestion-board like 3f2a...

    # Build a submission step by step, then send it
    suggestion-board draft set --title "Open lab hours"
    suggestion-board draft set --problem "..." --solution "..." --impact "..."
    suggestion-board draft submit
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .board import BoardError, DraftIncompleteError, SuggestionBoard
from .config import BoardConfig
from .feed import SortOrder
from .models import (
    Suggestion,
    SuggestionCategory,
    SuggestionType,
    require_category,
    require_type,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("suggestion-board")

CATEGORY_CHOICES = [c.name.lower() for c in SuggestionCategory]
TYPE_CHOICES = [t.name.lower() for t in SuggestionType]


def format_suggestion(suggestion: Suggestion, liked: bool = False) -> str:
    """One-line summary for the feed."""
    marker = "*" if liked else " "
    return (
        f"{marker} {suggestion.id}  "
        f"likes={suggestion.likes} views={suggestion.views} "
        f"comments={len(suggestion.comments)}  "
        f"[{suggestion.status.value}] {suggestion.title}"
    )


def format_details(suggestion: Suggestion) -> str:
    """Full view of a suggestion with its comments."""
    lines = [
        suggestion.title,
        f"  {suggestion.type.value} / {suggestion.category.value} / {suggestion.status.value}",
        f"  by {suggestion.author}",
        f"  problem:  {suggestion.problem}",
        f"  solution: {suggestion.solution}",
        f"  impact:   {suggestion.impact}",
        f"  likes={suggestion.likes} views={suggestion.views}",
        f"  comments ({len(suggestion.comments)}):",
    ]
    for comment in suggestion.comments:
        lines.append(f"    - {comment.author}: {comment.content}")
    return "\n".join(lines)


def report_fetch_error(board: SuggestionBoard) -> int:
    logger.error(f"Could not load suggestions: {board.last_error}")
    hint = board.error_hint()
    if hint == "schema_cache":
        logger.error("The data API has not picked up the table yet; reload its schema cache.")
    elif hint == "missing_table":
        logger.error(f"Table '{board.store.table}' does not exist in the remote store.")
    return 1


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------


async def cmd_list(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    if board.last_error:
        return report_fetch_error(board)

    suggestions = board.feed(
        category=require_category(args.category) if args.category else None,
        suggestion_type=require_type(args.type) if args.type else None,
        search=args.search,
        sort=SortOrder(args.sort),
    )
    for suggestion in suggestions:
        print(format_suggestion(suggestion, board.is_liked(suggestion.id)))
    logger.info(f"{len(suggestions)} of {len(board.suggestions)} suggestion(s) shown")
    return 0


async def cmd_show(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    if board.last_error:
        return report_fetch_error(board)

    suggestion = board.get(args.id)
    if suggestion is None:
        logger.error(f"Suggestion not found: {args.id}")
        return 1

    board.record_view(suggestion.id)
    print(format_details(suggestion))
    return 0


async def cmd_view(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    board.record_view(args.id)
    return 0


async def cmd_like(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    board.toggle_like(args.id)
    await board.drain()

    suggestion = board.get(args.id)
    state = "liked" if board.is_liked(args.id) else "unliked"
    if suggestion is not None:
        print(f"{state} {args.id} (likes={suggestion.likes})")
    else:
        print(f"{state} {args.id}")
    return 0


async def cmd_comment(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    try:
        comment = await board.add_comment(args.id, args.text)
    except (BoardError, ValueError) as e:
        logger.error(f"Comment failed: {e}")
        return 1
    print(f"comment {comment.id} added as {comment.author}")
    return 0


async def cmd_submit(board: SuggestionBoard, args: argparse.Namespace) -> int:
    await board.start()
    try:
        suggestion = await board.create(
            args.title,
            args.problem,
            args.solution,
            args.impact,
            require_category(args.category),
            require_type(args.type),
        )
    except BoardError as e:
        logger.error(f"Submission failed: {e}")
        return 1
    print(f"submitted {suggestion.id} as {suggestion.author}")
    return 0


async def cmd_whoami(board: SuggestionBoard, args: argparse.Namespace) -> int:
    board.session.init()
    print(f"visitor {board.visitor_id} ({board.author}), {len(board.liked_ids)} liked")
    return 0


async def cmd_draft(board: SuggestionBoard, args: argparse.Namespace) -> int:
    session = board.session
    session.init()

    if args.draft_command == "set":
        draft = session.update_draft(
            title=args.title,
            problem=args.problem,
            solution=args.solution,
            impact=args.impact,
            category=require_category(args.category) if args.category else None,
            type=require_type(args.type) if args.type else None,
        )
        print(f"draft saved, readiness {draft.readiness()}%")
        return 0

    if args.draft_command == "clear":
        session.clear_draft()
        print("draft cleared")
        return 0

    if args.draft_command == "submit":
        try:
            suggestion = await board.submit_draft()
        except DraftIncompleteError as e:
            logger.error(str(e))
            return 1
        except BoardError as e:
            logger.error(f"Submission failed, draft kept: {e}")
            return 1
        print(f"submitted {suggestion.id} as {suggestion.author}")
        return 0

    if not session.has_draft():
        print("no draft")
        return 0

    draft = session.load_draft()
    for name, value in draft.to_dict().items():
        print(f"{name}: {value}")
    print(f"readiness: {draft.readiness()}%")
    return 0


COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "view": cmd_view,
    "like": cmd_like,
    "comment": cmd_comment,
    "submit": cmd_submit,
    "whoami": cmd_whoami,
    "draft": cmd_draft,
}


async def run_command(board: SuggestionBoard, args: argparse.Namespace) -> int:
    """Run one command and release the board afterwards."""
    try:
        return await COMMANDS[args.command](board, args)
    finally:
        await board.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="suggestion-board",
        description="suggestion-board: browse, like and submit community suggestions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("suggestion_board.yaml"),
        help="Path to config file (default: suggestion_board.yaml)",
    )
    parser.add_argument(
        "--storage",
        type=Path,
        help="Override local storage path from config",
    )
    parser.add_argument(
        "--base-url",
        help="Override remote store URL from config",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    sub = parser.add_subparsers(dest="command")

    list_parser = sub.add_parser("list", help="Show the suggestion feed")
    list_parser.add_argument("--category", choices=CATEGORY_CHOICES)
    list_parser.add_argument("--type", choices=TYPE_CHOICES)
    list_parser.add_argument("--search", default="", help="Match title or problem text")
    list_parser.add_argument(
        "--sort", choices=[s.value for s in SortOrder], default=SortOrder.RECENT.value
    )

    show_parser = sub.add_parser("show", help="Show one suggestion (counts a view)")
    show_parser.add_argument("id")

    view_parser = sub.add_parser("view", help="Count a view")
    view_parser.add_argument("id")

    like_parser = sub.add_parser("like", help="Toggle like on a suggestion")
    like_parser.add_argument("id")

    comment_parser = sub.add_parser("comment", help="Comment on a suggestion")
    comment_parser.add_argument("id")
    comment_parser.add_argument("text")

    submit_parser = sub.add_parser("submit", help="Submit a suggestion directly")
    submit_parser.add_argument("--title", required=True)
    submit_parser.add_argument("--problem", required=True)
    submit_parser.add_argument("--solution", required=True)
    submit_parser.add_argument("--impact", required=True)
    submit_parser.add_argument("--category", choices=CATEGORY_CHOICES, default="other")
    submit_parser.add_argument("--type", choices=TYPE_CHOICES, default="initiative")

    sub.add_parser("whoami", help="Show this device's visitor id")

    draft_parser = sub.add_parser("draft", help="Work on a saved draft")
    draft_sub = draft_parser.add_subparsers(dest="draft_command")
    draft_set = draft_sub.add_parser("set", help="Update draft fields")
    draft_set.add_argument("--title")
    draft_set.add_argument("--problem")
    draft_set.add_argument("--solution")
    draft_set.add_argument("--impact")
    draft_set.add_argument("--category", choices=CATEGORY_CHOICES)
    draft_set.add_argument("--type", choices=TYPE_CHOICES)
    draft_sub.add_parser("show", help="Print the draft")
    draft_sub.add_parser("clear", help="Discard the draft")
    draft_sub.add_parser("submit", help="Submit the draft")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        return 0

    config = BoardConfig.from_yaml(args.config)
    if args.storage:
        config.storage.path = args.storage
    if args.base_url:
        config.remote.base_url = args.base_url

    logger.debug(f"Config loaded from {args.config}")
    logger.debug(f"Remote store: {config.remote.base_url} table={config.remote.table}")

    board = SuggestionBoard.from_config(config)
    return asyncio.run(run_command(board, args))


if __name__ == "__main__":
    sys.exit(main())
