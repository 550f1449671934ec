from typing import Any, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from aas_portal.api.guard import require_user
from aas_portal.db.session import get_db
from aas_portal.models.user import User
from aas_portal.schemas.post import CommentCreate, CommentResponse, PostWithComments
from aas_portal.services.post_service import PostService

router = APIRouter()


async def posts_with_comments(service: PostService) -> List[PostWithComments]:
    posts = await service.list_posts()
    comments = await service.comments_by_post()
    return [
        PostWithComments.model_validate(post).model_copy(
            update={"comments": [CommentResponse.model_validate(c) for c in comments.get(post.id, [])]}
        )
        for post in posts
    ]


@router.get("/", response_model=List[PostWithComments])
async def read_posts(db: AsyncSession = Depends(get_db)) -> Any:
    return await posts_with_comments(PostService(db))


@router.get("/{post_id}", response_model=PostWithComments)
async def read_post(post_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    service = PostService(db)
    post = await service.get_post(post_id)
    comments = await service.list_comments(post_id)
    return PostWithComments.model_validate(post).model_copy(
        update={"comments": [CommentResponse.model_validate(c) for c in comments]}
    )


@router.get("/{post_id}/comments", response_model=List[CommentResponse])
async def read_comments(post_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    service = PostService(db)
    await service.get_post(post_id)
    return await service.list_comments(post_id)


@router.post("/{post_id}/comments", response_model=CommentResponse, status_code=201)
async def add_comment(
    post_id: int,
    comment_in: CommentCreate,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
) -> Any:
    service = PostService(db)
    return await service.add_comment(post_id, current_user, comment_in.content)
