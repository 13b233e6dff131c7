"""Outward events emitted by the progression tracker"""

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EngineEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class RewardBundle(EngineEvent):
    level: int
    title: str
    description: str
    rewards: List[str] = Field(default_factory=list)


class LevelUpEvent(EngineEvent):
    kind: Literal["levelUp"] = "levelUp"
    old_level: int = Field(ge=1)
    new_level: int = Field(ge=1)
    title: str
    reward: Optional[RewardBundle] = None


class AchievementUnlockedEvent(EngineEvent):
    kind: Literal["achievementUnlocked"] = "achievementUnlocked"
    id: str
    title: str = ""
    xp_granted: int = Field(ge=0)


ProgressionEvent = Union[LevelUpEvent, AchievementUnlockedEvent]


__all__ = [
    'EngineEvent',
    'RewardBundle',
    'LevelUpEvent',
    'AchievementUnlockedEvent',
    'ProgressionEvent',
]
