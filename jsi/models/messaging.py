"""Messaging topic and configuration models."""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from .enums import RotationStrategy, TopicCategory, TopicFrequency, TopicPriority


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MessagingTopic(BaseModel):
    """A satisfaction theme that can be raised with a worker."""
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str
    is_enabled: bool = True
    priority: TopicPriority = TopicPriority.MEDIUM
    frequency: TopicFrequency = TopicFrequency.MONTHLY
    sample_prompts: list[str] = Field(..., min_length=1)
    category: TopicCategory = TopicCategory.CUSTOM
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class MessagingSettings(BaseModel):
    """Global topic-rotation settings for a messaging configuration."""
    enable_custom_topics: bool = True
    max_topics_per_prompt: int = Field(default=3, ge=1)
    topic_rotation_strategy: RotationStrategy = RotationStrategy.PRIORITY
    default_frequency: TopicFrequency = TopicFrequency.WEEKLY


class MessagingConfig(BaseModel):
    """Topics and rotation settings for a customer / agency."""
    customer_id: str
    agency_id: Optional[str] = None
    topics: list[MessagingTopic] = Field(default_factory=list)
    global_settings: MessagingSettings = Field(default_factory=MessagingSettings)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def config_id(self) -> str:
        return messaging_config_key(self.customer_id, self.agency_id)


def messaging_config_key(customer_id: str, agency_id: Optional[str] = None) -> str:
    return f"{customer_id}_{agency_id or 'default'}"


class MessagingConfigUpdate(BaseModel):
    """Partial update: either field may be replaced wholesale."""
    topics: Optional[list[MessagingTopic]] = None
    global_settings: Optional[MessagingSettings] = None


class CustomTopicCreate(BaseModel):
    """Caller-supplied fields for a new custom topic."""
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    sample_prompts: list[str] = Field(..., min_length=1)
    is_enabled: bool = True
    priority: TopicPriority = TopicPriority.MEDIUM
    frequency: TopicFrequency = TopicFrequency.MONTHLY


def _topic(
    id: str,
    name: str,
    description: str,
    priority: TopicPriority,
    frequency: TopicFrequency,
    category: TopicCategory,
    prompts: list[str],
) -> MessagingTopic:
    return MessagingTopic(
        id=id,
        name=name,
        description=description,
        priority=priority,
        frequency=frequency,
        category=category,
        sample_prompts=prompts,
    )


# Built-in catalogue copied into every new configuration
DEFAULT_TOPICS: tuple[MessagingTopic, ...] = (
    _topic(
        "work_life_balance", "Work-Life Balance",
        "Explore how work fits into overall life satisfaction",
        TopicPriority.HIGH, TopicFrequency.WEEKLY, TopicCategory.WELLBEING,
        [
            "How are you feeling about your work-life balance lately?",
            "Are you able to disconnect from work when you're off the clock?",
            "How does your current schedule work with your personal life?",
        ],
    ),
    _topic(
        "mental_health", "Mental Health",
        "Check in on emotional wellbeing and stress",
        TopicPriority.HIGH, TopicFrequency.WEEKLY, TopicCategory.WELLBEING,
        [
            "How has your stress level been this week?",
            "Are you feeling supported in managing work-related stress?",
            "How are you doing emotionally with everything going on?",
        ],
    ),
    _topic(
        "career_growth", "Career Growth",
        "Ask about long-term goals, skills growth, and mentorship desires",
        TopicPriority.MEDIUM, TopicFrequency.MONTHLY, TopicCategory.CAREER,
        [
            "What skills would you like to develop in your role?",
            "How do you see your career progressing here?",
            "Are you getting the opportunities you need to grow professionally?",
        ],
    ),
    _topic(
        "vibe_check", "Vibe Check / Daily Mood",
        "Lightweight rapport and engagement questions",
        TopicPriority.MEDIUM, TopicFrequency.WEEKLY, TopicCategory.ENGAGEMENT,
        [
            "How's your day going so far?",
            "What's been the highlight of your week?",
            "How are you feeling about work today?",
        ],
    ),
    _topic(
        "manager_relationship", "Relationship with Manager",
        "Questions about clarity, trust, communication",
        TopicPriority.HIGH, TopicFrequency.MONTHLY, TopicCategory.RELATIONSHIPS,
        [
            "How would you describe your relationship with your manager?",
            "Do you feel you get clear direction and feedback?",
            "How comfortable are you approaching your manager with concerns?",
        ],
    ),
    _topic(
        "job_role_clarity", "Job Role Clarity",
        "Does the worker understand what's expected of them?",
        TopicPriority.MEDIUM, TopicFrequency.MONTHLY, TopicCategory.ENGAGEMENT,
        [
            "How clear are you about your role and responsibilities?",
            "Do you feel you have the information you need to do your job well?",
            "Are there any aspects of your role that feel unclear?",
        ],
    ),
    _topic(
        "recognition_appreciation", "Recognition & Appreciation",
        "Do they feel valued at work?",
        TopicPriority.MEDIUM, TopicFrequency.MONTHLY, TopicCategory.ENGAGEMENT,
        [
            "Do you feel your contributions are recognized?",
            "How often do you receive positive feedback?",
            "Do you feel appreciated for the work you do?",
        ],
    ),
    _topic(
        "burnout_fatigue", "Burnout & Fatigue",
        "Are they mentally or physically exhausted?",
        TopicPriority.HIGH, TopicFrequency.WEEKLY, TopicCategory.WELLBEING,
        [
            "How would you rate your energy level lately?",
            "Are you feeling mentally or physically exhausted?",
            "Do you feel like you need a break?",
        ],
    ),
    _topic(
        "job_search_behavior", "Looking for Other Work",
        "Subtle detection of job search behavior",
        TopicPriority.HIGH, TopicFrequency.MONTHLY, TopicCategory.CAREER,
        [
            "How satisfied are you with your current role?",
            "Do you see yourself staying here long-term?",
            "What would make you consider other opportunities?",
        ],
    ),
    _topic(
        "happiness_outside_work", "Happiness Outside of Work",
        "Family, finances, housing, etc. as long-term risk flags",
        TopicPriority.LOW, TopicFrequency.QUARTERLY, TopicCategory.WELLBEING,
        [
            "How are things going outside of work?",
            "Are there any personal challenges affecting your work?",
            "How would you rate your overall life satisfaction?",
        ],
    ),
)


def default_messaging_config(
    customer_id: str,
    agency_id: Optional[str] = None,
) -> MessagingConfig:
    """Fresh configuration seeded with copies of the default catalogue."""
    return MessagingConfig(
        customer_id=customer_id,
        agency_id=agency_id,
        topics=[t.model_copy(deep=True) for t in DEFAULT_TOPICS],
        global_settings=MessagingSettings(),
    )
