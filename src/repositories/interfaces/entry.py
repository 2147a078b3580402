from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from src.database import models
from src.permissions.visibility import VisibilityPredicate

class IEntryRepository(ABC):
    @abstractmethod
    def create(self, entry_model: models.Entry) -> models.Entry:
        """새로운 항목을 데이터베이스에 생성합니다."""
        pass

    @abstractmethod
    def find_by_id(self, entry_id: int) -> Optional[models.Entry]:
        """고유 ID로 특정 항목을 조회합니다."""
        pass

    @abstractmethod
    def update_content(self, entry: models.Entry, content: str) -> models.Entry:
        """항목의 내용을 변경합니다."""
        pass

    @abstractmethod
    def delete(self, entry: models.Entry) -> bool:
        """특정 항목을 데이터베이스에서 삭제합니다. 삭제되지 않았으면 False를 반환합니다."""
        pass

    @abstractmethod
    def list_entries(
        self, predicate: VisibilityPredicate, page: int, page_size: int, order: str
    ) -> Tuple[List[models.Entry], int]:
        """
        열람 조건(predicate)을 만족하는 항목을 작성일 기준으로 정렬하여 한 페이지 조회합니다.

        Args:
            predicate: 조회자의 열람 조건. SQL 조건으로 변환되어 쿼리에 추가됩니다.
            page: 1부터 시작하는 페이지 번호.
            page_size: 페이지당 항목 수.
            order: 'ASC' 또는 'DESC'.

        Returns:
            (해당 페이지의 항목 리스트, 전체 페이지 수) 튜플.
        """
        pass
