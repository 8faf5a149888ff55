from uuid import uuid4

import pytest
import pytest_asyncio

from microguide.errors import NotFound
from microguide.models import ProgressStatus
from microguide.schemas.paths import NodeDraft, PathCreate, PathDocument
from microguide.schemas.progress import ProgressUpdate
from microguide.services.paths import PathService
from microguide.services.progress import ProgressService


@pytest_asyncio.fixture
async def stored_path(db_session, cache, test_user_id):
    service = PathService(db_session, cache, settle_delay=0)
    path = await service.save_generated_path(
        PathDocument(
            title="Watercolor Washes",
            description="",
            topic="design",
            difficulty_level="beginner",
            estimated_duration=3,
            nodes=[
                NodeDraft(title="Flat wash", content_type="video", order_index=1),
                NodeDraft(title="Graded wash", content_type="exercise", order_index=2),
            ],
        ),
        test_user_id,
    )
    return await service.get_path_with_nodes(path.id)


@pytest.fixture
def progress(db_session, cache):
    return ProgressService(db_session, cache)


@pytest.mark.asyncio
async def test_update_progress_upserts(progress, stored_path, test_user_id):
    node = stored_path.nodes[0]
    first = await progress.update_progress(
        test_user_id,
        ProgressUpdate(
            path_id=stored_path.id,
            node_id=node.id,
            status=ProgressStatus.in_progress,
            progress_percentage=40,
            time_spent=15,
        ),
    )
    assert first.started_at is not None
    assert first.completed_at is None

    second = await progress.update_progress(
        test_user_id,
        ProgressUpdate(
            path_id=stored_path.id,
            node_id=node.id,
            status=ProgressStatus.completed,
            progress_percentage=100,
            time_spent=25,
        ),
    )

    assert second.id == first.id
    assert second.status == ProgressStatus.completed
    assert second.completed_at is not None
    assert second.time_spent == 25


@pytest.mark.asyncio
async def test_progress_read_is_cached_and_evicted_on_update(
    progress, cache, stored_path, test_user_id
):
    assert await progress.get_user_progress(test_user_id, stored_path.id) == []
    assert await cache.get(f"progress-{test_user_id}-{stored_path.id}") == []

    await progress.update_progress(
        test_user_id,
        ProgressUpdate(
            path_id=stored_path.id,
            node_id=stored_path.nodes[1].id,
            status=ProgressStatus.skipped,
        ),
    )

    assert await cache.get(f"progress-{test_user_id}-{stored_path.id}") is None
    records = await progress.get_user_progress(test_user_id, stored_path.id)
    assert [r.node_id for r in records] == [stored_path.nodes[1].id]


@pytest.mark.asyncio
async def test_update_progress_for_unknown_node(progress, stored_path, test_user_id):
    with pytest.raises(NotFound):
        await progress.update_progress(
            test_user_id,
            ProgressUpdate(
                path_id=stored_path.id,
                node_id=uuid4(),
                status=ProgressStatus.in_progress,
            ),
        )


@pytest.mark.asyncio
async def test_update_progress_on_private_path_of_another_user(
    db_session, cache, progress, test_user_id, other_user_id
):
    service = PathService(db_session, cache, settle_delay=0)
    private = await service.create_path(
        PathCreate(
            title="Sketchbook Habits",
            topic="design",
            is_public=False,
            nodes=[NodeDraft(
                    title="Daily thumbnails", content_type="exercise", order_index=1
                )],
        ),
        other_user_id,
    )
    node = (await service.get_path_with_nodes(private.id, other_user_id)).nodes[0]

    with pytest.raises(NotFound):
        await progress.update_progress(
            test_user_id,
            ProgressUpdate(
                path_id=private.id, node_id=node.id, status=ProgressStatus.in_progress
            ),
        )

    owned = await progress.update_progress(
        other_user_id,
        ProgressUpdate(
            path_id=private.id, node_id=node.id, status=ProgressStatus.in_progress
        ),
    )
    assert owned.user_id == other_user_id
