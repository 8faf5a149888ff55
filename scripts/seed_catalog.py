"""Seed a fresh catalog with one public path per topic template and difficulty."""

import argparse
import asyncio
from typing import List
from uuid import UUID

import structlog
from sqlalchemy import select

from microguide.db import base
from microguide.logging_config import configure_logging
from microguide.models import LearningPath
from microguide.schemas.paths import GeneratePathRequest
from microguide.services.cache import QueryCache
from microguide.services.paths import PathService
from microguide.services.synthesis import PathGenerator
from microguide.services.topic_templates import TOPIC_TEMPLATES

SEED_USER_ID = UUID("00000000-0000-0000-0000-000000000001")
DIFFICULTIES = ("beginner", "intermediate", "advanced")

logger = structlog.get_logger(__name__)


async def seed_catalog(owner: UUID = SEED_USER_ID) -> List[LearningPath]:
    """Synthesize and save missing (template, difficulty) paths for ``owner``."""
    await base.init_db()
    assert base.AsyncSessionLocal is not None

    generator = PathGenerator(use_completion=False)
    created: List[LearningPath] = []
    async with base.AsyncSessionLocal() as session:
        service = PathService(session, QueryCache(), settle_delay=0)
        for key, template in TOPIC_TEMPLATES.items():
            for difficulty in DIFFICULTIES:
                request = GeneratePathRequest(query=key, difficulty=difficulty)
                document = await generator.generate(request)

                existing = await session.execute(
                    select(LearningPath.id).where(
                        LearningPath.created_by == owner,
                        LearningPath.title == document.title,
                    )
                )
                if existing.first() is not None:
                    logger.info("seed_skipped", topic=key, difficulty=difficulty)
                    continue

                path = await service.save_generated_path(document, owner)
                created.append(path)
                logger.info(
                    "seed_created",
                    topic=key,
                    difficulty=difficulty,
                    path_id=str(path.id),
                    nodes=path.total_nodes,
                )

    await base.close_db()
    return created


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--owner", type=UUID, default=SEED_USER_ID)
    args = parser.parse_args()

    configure_logging()
    created = asyncio.run(seed_catalog(args.owner))
    logger.info("seed_complete", created=len(created))


if __name__ == "__main__":
    main()
