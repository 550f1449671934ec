"""
News posts and comments.
"""
import pytest
from sqlalchemy import func
from sqlalchemy.future import select

from aas_portal.core.errors import NotFound, PermissionDenied, ValidationFailed, VersionConflict
from aas_portal.models.post import Comment, media_kind
from aas_portal.models.user import UserRole
from aas_portal.schemas.post import PostCreate, PostUpdate
from aas_portal.services.post_service import PostService


@pytest.mark.parametrize(
    "url, kind",
    [
        ("/storage/posts/clip.mp4", "video"),
        ("/storage/posts/CLIP.MP4?download=1", "video"),
        ("/storage/posts/photo.jpg", "image"),
        ("/storage/posts/photo.png", "image"),
        (None, None),
    ],
)
def test_media_kind_from_extension(url, kind):
    assert media_kind(url) == kind


@pytest.mark.asyncio
async def test_create_and_edit_post(db, make_user):
    admin = await make_user(verified=True, role=UserRole.ADMIN)
    service = PostService(db)

    post = await service.create_post(admin, PostCreate(title=" Rights ", content="Keep receipts", media="/storage/posts/a.mp4"))
    assert post.title == "Rights"
    assert post.media_kind == "video"
    assert post.creator.id == admin.id
    assert post.version == 1

    edited = await service.update_post(post.id, PostUpdate(title="Rights", content="Updated", media=None, version=1))
    assert edited.content == "Updated"
    assert edited.media is None
    assert edited.version == 2

    with pytest.raises(VersionConflict):
        await service.update_post(post.id, PostUpdate(title="Old", content="Old", version=1))


@pytest.mark.asyncio
async def test_post_fields_required(db, make_user):
    admin = await make_user(verified=True, role=UserRole.ADMIN)
    with pytest.raises(ValidationFailed) as excinfo:
        await PostService(db).create_post(admin, PostCreate(title="  ", content="Body"))
    assert excinfo.value.message_key == "post_fields_required"


@pytest.mark.asyncio
async def test_comments_need_verified_user_and_text(db, make_user):
    admin = await make_user(verified=True, role=UserRole.ADMIN)
    member = await make_user(verified=True, full_name="Mariem")
    newcomer = await make_user(verified=False)
    service = PostService(db)
    post = await service.create_post(admin, PostCreate(title="News", content="Body"))

    comment = await service.add_comment(post.id, member, "  Thank you  ")
    assert comment.content == "Thank you"
    assert comment.author.full_name == "Mariem"

    with pytest.raises(PermissionDenied):
        await service.add_comment(post.id, newcomer, "Hello")
    with pytest.raises(ValidationFailed):
        await service.add_comment(post.id, member, "   ")
    with pytest.raises(NotFound):
        await service.add_comment(9999, member, "Hello")

    second = await service.add_comment(post.id, member, "Second")
    comments = await service.list_comments(post.id)
    assert [c.id for c in comments] == [comment.id, second.id]
    assert (await service.comments_by_post())[post.id][1].id == second.id


@pytest.mark.asyncio
async def test_delete_post_removes_comments(db, make_user):
    admin = await make_user(verified=True, role=UserRole.ADMIN)
    member = await make_user(verified=True)
    service = PostService(db)
    post = await service.create_post(admin, PostCreate(title="News", content="Body"))
    await service.add_comment(post.id, member, "First")

    await service.delete_post(post.id)

    assert await service.list_posts() == []
    remaining = (await db.execute(select(func.count(Comment.id)))).scalar_one()
    assert remaining == 0
    with pytest.raises(NotFound):
        await service.get_post(post.id)


@pytest.mark.asyncio
async def test_posts_listed_newest_first(db, make_user):
    admin = await make_user(verified=True, role=UserRole.ADMIN)
    service = PostService(db)
    older = await service.create_post(admin, PostCreate(title="One", content="Body"))
    newer = await service.create_post(admin, PostCreate(title="Two", content="Body"))

    assert [p.id for p in await service.list_posts()] == [newer.id, older.id]
