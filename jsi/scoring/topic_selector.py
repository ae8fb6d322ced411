"""Topic rotation for satisfaction check-in prompts.

Strategies (applied to enabled topics only, capped at max_topics_per_prompt):

  priority  → ceil(n/2) high, then ceil(n/3) medium, then ceil(n/6) low,
              each tier in configured order
  frequency → up to 2 weekly topics, then up to 1 monthly topic
              (quarterly topics are not selected by this strategy)
  random    → uniform shuffle; also used for unrecognised strategies
"""
import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Union

import structlog

from jsi.errors import NoEligibleTopics
from jsi.models.enums import RotationStrategy, TopicFrequency, TopicPriority
from jsi.models.messaging import MessagingConfig, MessagingTopic

logger = structlog.get_logger(__name__)

WEEKLY_SLOTS: int = 2
MONTHLY_SLOTS: int = 1


@dataclass
class TopicSelection:
    """Selected topics and the prompt rendered from them."""

    topics: List[MessagingTopic] = field(default_factory=list)
    prompt: str = ""
    strategy: Optional[RotationStrategy] = None

    def to_dict(self) -> dict:
        return {
            "prompt": self.prompt,
            "strategy": self.strategy.value if self.strategy else None,
            "topics": [
                {"id": t.id, "name": t.name, "category": t.category.value}
                for t in self.topics
            ],
        }


class TopicSelector:
    """Choose which messaging topics to raise and render a prompt.

    Parameters
    ----------
    rng:
        Random source used by the ``random`` strategy and for sample-prompt
        choice. Pass a seeded ``random.Random`` for deterministic output.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    @staticmethod
    def resolve_strategy(
        strategy: Union[RotationStrategy, str, None],
        config: MessagingConfig,
    ) -> RotationStrategy:
        if strategy is None:
            return config.global_settings.topic_rotation_strategy
        if isinstance(strategy, RotationStrategy):
            return strategy
        try:
            return RotationStrategy(strategy)
        except ValueError:
            logger.warning("unknown_rotation_strategy", strategy=strategy, fallback="random")
            return RotationStrategy.RANDOM

    @staticmethod
    def by_priority(topics: List[MessagingTopic], limit: int) -> List[MessagingTopic]:
        high = [t for t in topics if t.priority == TopicPriority.HIGH]
        medium = [t for t in topics if t.priority == TopicPriority.MEDIUM]
        low = [t for t in topics if t.priority == TopicPriority.LOW]
        selected = (
            high[: math.ceil(limit / 2)]
            + medium[: math.ceil(limit / 3)]
            + low[: math.ceil(limit / 6)]
        )
        return selected[:limit]

    @staticmethod
    def by_frequency(topics: List[MessagingTopic], limit: int) -> List[MessagingTopic]:
        weekly = [t for t in topics if t.frequency == TopicFrequency.WEEKLY]
        monthly = [t for t in topics if t.frequency == TopicFrequency.MONTHLY]
        return (weekly[:WEEKLY_SLOTS] + monthly[:MONTHLY_SLOTS])[:limit]

    def at_random(self, topics: List[MessagingTopic], limit: int) -> List[MessagingTopic]:
        shuffled = list(topics)
        self.rng.shuffle(shuffled)
        return shuffled[:limit]

    def render_prompt(self, topics: List[MessagingTopic]) -> str:
        """One ``"{name}: {prompt}"`` line per topic, separated by blank lines."""
        lines = [f"{t.name}: {self.rng.choice(t.sample_prompts)}" for t in topics]
        return "\n\n".join(lines)

    def select(
        self,
        config: MessagingConfig,
        strategy: Union[RotationStrategy, str, None] = None,
    ) -> TopicSelection:
        """Select topics for one prompt.

        Args:
            config: Messaging configuration to draw topics from.
            strategy: Override the configured rotation strategy.

        Raises:
            NoEligibleTopics: If no topic is enabled.
        """
        enabled = [t for t in config.topics if t.is_enabled]
        if not enabled:
            raise NoEligibleTopics("No enabled messaging topics found")

        resolved = self.resolve_strategy(strategy, config)
        limit = config.global_settings.max_topics_per_prompt

        if resolved == RotationStrategy.PRIORITY:
            selected = self.by_priority(enabled, limit)
        elif resolved == RotationStrategy.FREQUENCY:
            selected = self.by_frequency(enabled, limit)
        else:
            selected = self.at_random(enabled, limit)

        prompt = self.render_prompt(selected)
        logger.info(
            "topics_selected",
            customer_id=config.customer_id,
            strategy=resolved.value,
            enabled=len(enabled),
            selected=[t.id for t in selected],
        )
        return TopicSelection(topics=selected, prompt=prompt, strategy=resolved)
