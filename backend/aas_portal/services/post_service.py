"""
News posts published by staff and member comments on them.
"""
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from aas_portal.core.errors import NotFound, PermissionDenied, ValidationFailed, VersionConflict
from aas_portal.models.post import Comment, Post
from aas_portal.models.user import User
from aas_portal.schemas.post import PostCreate, PostUpdate

logger = logging.getLogger(__name__)


class PostService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_posts(self) -> List[Post]:
        """All posts newest first, with their creator."""
        result = await self.db.execute(
            select(Post)
            .options(selectinload(Post.creator))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def get_post(self, post_id: int) -> Post:
        result = await self.db.execute(
            select(Post)
            .where(Post.id == post_id)
            .options(selectinload(Post.creator))
            .execution_options(populate_existing=True)
        )
        post = result.scalars().first()
        if not post:
            raise NotFound("post_not_found")
        return post

    async def create_post(self, admin: User, post_in: PostCreate) -> Post:
        self._check_fields(post_in)
        post = Post(
            title=post_in.title.strip(),
            content=post_in.content.strip(),
            media=post_in.media or None,
            created_by=admin.id,
        )
        self.db.add(post)
        await self.db.commit()
        logger.info(f"Post {post.id} created by admin {admin.id}")
        return await self.get_post(post.id)

    async def update_post(self, post_id: int, post_in: PostUpdate) -> Post:
        self._check_fields(post_in)
        result = await self.db.execute(
            update(Post)
            .where(Post.id == post_id, Post.version == post_in.version)
            .values(
                title=post_in.title.strip(),
                content=post_in.content.strip(),
                media=post_in.media or None,
                version=Post.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self.db.rollback()
            current = (await self.db.execute(select(Post).where(Post.id == post_id))).scalars().first()
            if not current:
                raise NotFound("post_not_found")
            raise VersionConflict(current_version=current.version)
        await self.db.commit()
        return await self.get_post(post_id)

    async def delete_post(self, post_id: int) -> None:
        """Delete a post together with its comments."""
        await self.get_post(post_id)
        await self.db.execute(delete(Comment).where(Comment.post_id == post_id))
        await self.db.execute(delete(Post).where(Post.id == post_id))
        await self.db.commit()
        logger.info(f"Post {post_id} deleted")

    async def list_comments(self, post_id: int) -> List[Comment]:
        """Comments of one post, oldest first, with their author."""
        result = await self.db.execute(
            select(Comment)
            .where(Comment.post_id == post_id)
            .options(selectinload(Comment.author))
            .order_by(Comment.created_at, Comment.id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def comments_by_post(self) -> Dict[int, List[Comment]]:
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .order_by(Comment.created_at, Comment.id)
            .execution_options(populate_existing=True)
        )
        grouped: Dict[int, List[Comment]] = defaultdict(list)
        for comment in result.scalars().all():
            grouped[comment.post_id].append(comment)
        return grouped

    async def add_comment(self, post_id: int, user: User, content: Optional[str]) -> Comment:
        """Verified members may comment; blank comments are refused."""
        if not user.is_verified:
            raise PermissionDenied("verification_required")
        text = (content or "").strip()
        if not text:
            raise ValidationFailed("comment_empty")
        await self.get_post(post_id)

        comment = Comment(post_id=post_id, user_id=user.id, content=text)
        self.db.add(comment)
        await self.db.commit()

        result = await self.db.execute(
            select(Comment)
            .where(Comment.id == comment.id)
            .options(selectinload(Comment.author))
            .execution_options(populate_existing=True)
        )
        return result.scalars().one()

    @staticmethod
    def _check_fields(post_in: PostCreate) -> None:
        if not post_in.title.strip() or not post_in.content.strip():
            raise ValidationFailed("post_fields_required")
