from typing import Dict, Any

from sqlalchemy import select

from database.models import SettlementStatus
from database.repositories.base import BaseRepository


class SettlementRepository(BaseRepository):
    def get_statuses(self, season: int) -> Dict[Any, str]:
        """user_id -> settlement status for a season. Users without a row are absent (treated as unpaid)."""
        stmt = select(SettlementStatus.user_id, SettlementStatus.status).where(
            SettlementStatus.season == season
        )
        return {row.user_id: row.status for row in self.db.execute(stmt).all()}
