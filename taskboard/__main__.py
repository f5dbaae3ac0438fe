"""
Print one owner's board from a running board_server.

Usage:
    python -m taskboard --owner alice
    python -m taskboard --owner alice --api http://localhost:5001/api --config board.yaml
"""
import argparse
import asyncio
import sys

from .board import TaskBoard
from .config import BoardConfig, setup_logging
from .errors import FetchError


def render(board: TaskBoard) -> str:
    lines = []
    for column, tasks in board.columns.items():
        lines.append(f"── {column.value} ({len(tasks)})")
        for task in tasks:
            due = f"  due {task.deadline}" if task.deadline else ""
            lines.append(f"   [{task.priority.value:<6}] {task.title}  {task.progress}%{due}")
    return "\n".join(lines)


async def run(cfg: BoardConfig, owner_id: str) -> int:
    board = TaskBoard.from_config(cfg)
    board.on_notification(lambda event: print(f"  {event.message}"))
    try:
        await board.open(owner_id)
    except FetchError as e:
        print(f"Could not load board: {e}", file=sys.stderr)
        return 1
    finally:
        await board.close()

    print(render(board))
    if board.notes and board.notes.content:
        print(f"\nNotes:\n{board.notes.content}")
    return 0


def main():
    ap = argparse.ArgumentParser(description="Show a task board")
    ap.add_argument("--owner", required=True, help="Owner identity whose board to show")
    ap.add_argument("--api", default=None, help="Store API base URL (default from config)")
    ap.add_argument("--config", default=None, help="Path to config.yaml")
    args = ap.parse_args()

    cfg = BoardConfig.load(args.config)
    if args.api:
        cfg.api_url = args.api
    setup_logging(cfg.log_level)
    sys.exit(asyncio.run(run(cfg, args.owner)))


if __name__ == "__main__":
    main()
