"""FastAPI dependencies wiring request sessions to the app-scoped collaborators."""

from typing import Union

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from microguide.db.base import get_db
from microguide.services.cache import QueryCache, RedisQueryCache
from microguide.services.intent import QueryIntentParser
from microguide.services.paths import PathService
from microguide.services.progress import ProgressService
from microguide.services.search import SearchService
from microguide.services.synthesis import PathGenerator


def get_query_cache(request: Request) -> Union[QueryCache, RedisQueryCache]:
    return request.app.state.cache


def get_path_generator(request: Request) -> PathGenerator:
    return request.app.state.generator


def get_intent_parser(request: Request) -> QueryIntentParser:
    return request.app.state.parser


def get_path_service(
    db: AsyncSession = Depends(get_db),
    cache: Union[QueryCache, RedisQueryCache] = Depends(get_query_cache),
) -> PathService:
    return PathService(db, cache)


def get_progress_service(
    db: AsyncSession = Depends(get_db),
    cache: Union[QueryCache, RedisQueryCache] = Depends(get_query_cache),
) -> ProgressService:
    return ProgressService(db, cache)


def get_search_service(
    db: AsyncSession = Depends(get_db),
    cache: Union[QueryCache, RedisQueryCache] = Depends(get_query_cache),
    parser: QueryIntentParser = Depends(get_intent_parser),
) -> SearchService:
    return SearchService(db, cache, parser)
