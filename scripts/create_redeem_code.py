"""Create redeem codes directly in the database.

Usage:
    python -m scripts.create_redeem_code SPRING2024 WELCOME-PRO
"""

import argparse
import asyncio

from rizzchat.core.database import Base, async_session_factory, engine
from rizzchat.repositories.redeem_code_repo import RedeemCodeRepository
from rizzchat.schemas.redeem_schema import normalize_code


async def create_codes(codes: list[str]) -> None:
    """Insert each code that does not already exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with async_session_factory() as session:
        repo = RedeemCodeRepository(session)
        for raw in codes:
            code = normalize_code(raw)
            if not code:
                print(f"Skipping blank code {raw!r}.")
                continue
            if await repo.exists_by_code(code):
                print(f"Code '{code}' already exists.")
                continue
            created = await repo.create(code)
            print(f"Redeem code created: {created.code} (id={created.id})")
        await session.commit()

    await engine.dispose()


def main() -> None:
    parser = argparse.ArgumentParser(description="Create redeem codes")
    parser.add_argument("codes", nargs="+", help="Codes to create (case-insensitive)")
    args = parser.parse_args()

    asyncio.run(create_codes(args.codes))


if __name__ == "__main__":
    main()
