"""
Seed a public board with every registered website.

Usage:
    python -m tasks.seed_public [--owner-key seed] [--board-slug discover] [--limit N]

The board is created (public) when missing, or made public when it exists as
a private board. Websites already on the owner's boards are counted as
deduped, so the task is safe to re-run.
"""
import argparse
import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db.session import async_session_factory
from services.wap_service import SeedResult, seed_public_board

logger = logging.getLogger(__name__)


async def run_seed(
    owner_key: str = "seed",
    board_slug: str = "discover",
    limit: int | None = None,
    db: AsyncSession | None = None,
) -> SeedResult:
    """
    Run the seeding in its own transaction.

    Args:
        owner_key: Owner of the public board.
        board_slug: Slug of the public board.
        limit: Maximum number of websites to add.
        db: Optional session (for tests). When given, the caller owns the
            transaction and nothing is committed here.
    """
    if db is not None:
        return await seed_public_board(db, owner_key, board_slug, limit)

    async with async_session_factory() as session:
        try:
            result = await seed_public_board(session, owner_key, board_slug, limit)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
    return result


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Seed a public board with all websites.")
    parser.add_argument("--owner-key", default="seed")
    parser.add_argument("--board-slug", default="discover")
    parser.add_argument("--limit", type=int, default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Entry point for running the seeding as a script."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = parse_args(argv)
    result = asyncio.run(run_seed(args.owner_key, args.board_slug, args.limit))
    logger.info(
        "Board %s: %d websites, %d added, %d deduped, %d failed",
        result.board_id, result.total, result.added, result.deduped, result.failed,
    )


if __name__ == "__main__":
    main()
