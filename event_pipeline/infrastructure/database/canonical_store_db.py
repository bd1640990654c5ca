"""DB-backed canonical store. Counters go through store-side procedures; everything else is a single statement."""

import logging
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import delete, or_, text, update
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql import func

from event_pipeline.application.exceptions import StoreOperationError
from event_pipeline.application.store import CampaignRecord, CampaignSearchRow, RoleRecord
from event_pipeline.infrastructure.database.models import (
    CampaignSearchProjection,
    Fundraiser,
    Role,
    RolePermission,
    SearchResultsCache,
    UserRoleAssignment,
)
from event_pipeline.infrastructure.database.repository import insert_ignore_statement, upsert_statement

logger = logging.getLogger(__name__)

# Both procedures take a row lock and increment in place; they tolerate concurrent callers.
CAMPAIGN_ANALYTICS_PROC = text(
    "SELECT update_campaign_analytics_safe(:p_campaign_id, :p_amount, :p_donor_id)"
)
DONOR_HISTORY_PROC = text(
    "SELECT update_donor_history_safe(:p_user_id, :p_amount, :p_campaign_id)"
)


class DbCanonicalStore:
    """Implements CanonicalStore protocol. One session per call so concurrent processors never share one."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _call_procedure(self, name: str, statement, params: dict) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(statement, params)
                await session.commit()
        except SQLAlchemyError as e:
            cause = str(e.orig or e) if isinstance(e, DBAPIError) else str(e)
            logger.error("store_procedure_failed", extra={"procedure": name, "error": cause})
            raise StoreOperationError(name, cause) from e
        return True

    async def increment_campaign_analytics(
        self,
        campaign_id: str,
        amount: Decimal,
        donor_id: Optional[str],
    ) -> bool:
        return await self._call_procedure(
            "update_campaign_analytics_safe",
            CAMPAIGN_ANALYTICS_PROC,
            {"p_campaign_id": campaign_id, "p_amount": amount, "p_donor_id": donor_id},
        )

    async def increment_donor_history(
        self,
        user_id: str,
        amount: Decimal,
        campaign_id: str,
    ) -> bool:
        return await self._call_procedure(
            "update_donor_history_safe",
            DONOR_HISTORY_PROC,
            {"p_user_id": user_id, "p_amount": amount, "p_campaign_id": campaign_id},
        )

    async def get_campaign(self, campaign_id: str) -> Optional[CampaignRecord]:
        async with self._session_factory() as session:
            row = await session.get(Fundraiser, campaign_id)
        if row is None:
            return None
        return CampaignRecord(
            id=row.id,
            title=row.title,
            owner_user_id=row.owner_user_id,
            slug=row.slug,
            summary=row.summary,
            story_html=row.story_html,
            beneficiary_name=row.beneficiary_name,
            location=row.location,
            tags=list(row.tags or []),
            status=row.status,
            visibility=row.visibility,
        )

    async def update_campaign_status(self, campaign_id: str, status: str) -> None:
        stmt = (
            update(Fundraiser)
            .where(Fundraiser.id == campaign_id)
            .values(status=status, updated_at=func.now())
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def upsert_campaign_search_projection(self, row: CampaignSearchRow) -> None:
        values = {
            "campaign_id": row.campaign_id,
            "title": row.title,
            "slug": row.slug,
            "summary": row.summary,
            "story_text": row.story_text,
            "beneficiary_name": row.beneficiary_name,
            "location": row.location,
            "tags": list(row.tags),
            "status": row.status,
            "visibility": row.visibility,
        }
        async with self._session_factory() as session:
            await session.execute(upsert_statement(CampaignSearchProjection, values, ["campaign_id"]))
            await session.commit()

    async def invalidate_search_cache(self, terms: Sequence[str]) -> int:
        if not terms:
            return 0
        stmt = delete(SearchResultsCache).where(
            or_(*(SearchResultsCache.query.icontains(term, autoescape=True) for term in terms))
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            await session.commit()
            return result.rowcount or 0

    async def assign_role(
        self,
        user_id: str,
        role_id: str,
        context_type: Optional[str],
        context_id: Optional[str],
        assigned_by: Optional[str] = None,
    ) -> None:
        values = {
            "user_id": user_id,
            "role_id": role_id,
            "context_type": context_type,
            "context_id": context_id,
            "assigned_by": assigned_by,
            "is_active": True,
        }
        stmt = upsert_statement(
            UserRoleAssignment,
            values,
            ["user_id", "role_id"],
            set_={"is_active": True, "updated_at": func.now()},
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def revoke_role(self, user_id: str, role_id: str) -> None:
        stmt = (
            update(UserRoleAssignment)
            .where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role_id == role_id,
                UserRoleAssignment.is_active.is_(True),
            )
            .values(is_active=False, updated_at=func.now())
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

    async def create_role(self, role: RoleRecord) -> None:
        values = {
            "id": role.id,
            "name": role.name,
            "display_name": role.display_name,
            "description": role.description,
            "hierarchy_level": role.hierarchy_level,
            "is_system_role": role.is_system_role,
        }
        async with self._session_factory() as session:
            await session.execute(insert_ignore_statement(Role, values, ["id"]))
            await session.commit()

    async def update_role_permissions(
        self,
        role_id: str,
        added: Sequence[str],
        removed: Sequence[str],
    ) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                if removed:
                    await session.execute(
                        delete(RolePermission).where(
                            RolePermission.role_id == role_id,
                            RolePermission.permission_id.in_(list(removed)),
                        )
                    )
                for permission_id in added:
                    await session.execute(
                        insert_ignore_statement(
                            RolePermission,
                            {"role_id": role_id, "permission_id": permission_id},
                            ["role_id", "permission_id"],
                        )
                    )

