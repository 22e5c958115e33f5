import logging
from datetime import date
from enum import Enum
from typing import Optional

from extraction.ai_extractor import AIExtractor
from extraction.rule_based import RuleBasedExtractor
from lecture_ai.models import ExtractionResult

logger = logging.getLogger(__name__)


class ExtractionStrategy(str, Enum):
    AI = "ai"
    RULE_BASED = "rule_based"


class TaskExtractor:
    """Runs one extraction strategy over a transcript. Falling back is up to the caller."""

    def __init__(
        self,
        ai_extractor: Optional[AIExtractor] = None,
        rule_based: Optional[RuleBasedExtractor] = None,
    ):
        self.ai_extractor = ai_extractor or AIExtractor()
        self.rule_based = rule_based or RuleBasedExtractor()

    def extract(
        self,
        transcript: str,
        lecture_id: int,
        course_id: int,
        strategy: ExtractionStrategy = ExtractionStrategy.AI,
        today: Optional[date] = None,
    ) -> ExtractionResult:
        today = today or date.today()
        strategy = ExtractionStrategy(strategy)
        logger.info(f"Extracting tasks for lecture {lecture_id} with strategy {strategy.value}")

        if strategy is ExtractionStrategy.RULE_BASED:
            drafts = self.rule_based.extract(transcript, today=today)
        else:
            drafts = self.ai_extractor.extract(transcript, today=today)

        return ExtractionResult(
            lecture_id=lecture_id,
            course_id=course_id,
            strategy=strategy.value,
            drafts=drafts,
        )
