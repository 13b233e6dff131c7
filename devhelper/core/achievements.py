#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0 - Achievement Catalog
Declarative achievement table, level titles and level-up rewards

Version: 1.0.0
Date: 2026-10-19
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from devhelper.models.events import RewardBundle
from devhelper.models.progression import UserProgression

logger = logging.getLogger(__name__)

# ===== CHECKERS =====

class AchievementChecker(ABC):
    """Unlock predicate of an achievement"""

    @abstractmethod
    def check(self, progression: UserProgression) -> bool:
        pass

    @abstractmethod
    def get_progress(self, progression: UserProgression) -> Tuple[int, int]:
        """(current, target)"""
        pass


class CounterChecker(AchievementChecker):
    """Cumulative counter reaching a target"""

    def __init__(self, target: int, value_getter: Callable[[UserProgression], int]):
        self.target = target
        self.value_getter = value_getter

    def check(self, progression: UserProgression) -> bool:
        return self.value_getter(progression) >= self.target

    def get_progress(self, progression: UserProgression) -> Tuple[int, int]:
        return min(self.target, self.value_getter(progression)), self.target

# ===== DEFINITIONS =====

@dataclass(frozen=True)
class Achievement:
    achievement_id: str
    title: str
    description: str
    icon: str
    xp_reward: int
    checker: AchievementChecker

    def is_satisfied(self, progression: UserProgression) -> bool:
        return self.checker.check(progression)

    def get_progress(self, progression: UserProgression) -> Tuple[int, int]:
        return self.checker.get_progress(progression)

    def to_dict(self) -> Dict[str, object]:
        return {
            'id': self.achievement_id,
            'title': self.title,
            'description': self.description,
            'icon': self.icon,
            'xp_reward': self.xp_reward,
        }


@dataclass(frozen=True)
class LevelUpReward:
    level: int
    title: str
    description: str
    rewards: Tuple[str, ...]

    def to_bundle(self) -> RewardBundle:
        return RewardBundle(
            level=self.level,
            title=self.title,
            description=self.description,
            rewards=list(self.rewards),
        )


def _tasks(p: UserProgression) -> int:
    return p.total_tasks


def _focus_sessions(p: UserProgression) -> int:
    return p.total_focus_sessions


def _focus_minutes(p: UserProgression) -> int:
    return p.total_focus_time_minutes


def _streak(p: UserProgression) -> int:
    return p.streak_days

# ===== CATALOG =====

class AchievementCatalog:
    """Ordered ``id -> Achievement`` table"""

    def __init__(self, achievements: Optional[List[Achievement]] = None):
        self._achievements: Dict[str, Achievement] = {}
        for achievement in (achievements if achievements is not None else default_achievements()):
            self.register(achievement)

    def register(self, achievement: Achievement) -> None:
        if achievement.achievement_id in self._achievements:
            raise ValueError(f"Duplicate achievement id: {achievement.achievement_id}")
        self._achievements[achievement.achievement_id] = achievement
        logger.debug(f"Registered achievement: {achievement.achievement_id}")

    def get(self, achievement_id: str) -> Optional[Achievement]:
        return self._achievements.get(achievement_id)

    def all(self) -> List[Achievement]:
        return list(self._achievements.values())

    def __contains__(self, achievement_id: object) -> bool:
        return achievement_id in self._achievements

    def __iter__(self) -> Iterator[Achievement]:
        return iter(self._achievements.values())

    def __len__(self) -> int:
        return len(self._achievements)

    def evaluate(self, progression: UserProgression) -> List[Achievement]:
        """Achievements whose predicate holds and that are not unlocked yet"""
        return [
            achievement for achievement in self._achievements.values()
            if not progression.has_achievement(achievement.achievement_id)
            and achievement.is_satisfied(progression)
        ]

    def get_progress(self, progression: UserProgression) -> Dict[str, Tuple[int, int]]:
        return {a.achievement_id: a.get_progress(progression) for a in self._achievements.values()}


def default_achievements() -> List[Achievement]:
    return [
        # Tasks
        Achievement("first_task", "Primeira Tarefa", "Complete sua primeira tarefa",
                    "$(trophy)", 100, CounterChecker(1, _tasks)),
        Achievement("task_warrior", "Guerreiro das Tarefas", "Complete 50 tarefas",
                    "$(shield)", 1000, CounterChecker(50, _tasks)),
        Achievement("task_master", "Mestre das Tarefas", "Complete 100 tarefas",
                    "$(crown)", 2000, CounterChecker(100, _tasks)),
        # TODO: give priority_king a predicate over completed URGENT tasks once they are counted
        Achievement("priority_king", "Rei das Prioridades", "Complete 50 tarefas priorizadas",
                    "$(star-full)", 1500, CounterChecker(50, _tasks)),

        # Focus
        Achievement("focus_master", "Mestre do Foco", "Complete 10 sessões de hiperfoco",
                    "$(zap)", 500, CounterChecker(10, _focus_sessions)),
        Achievement("focus_legend", "Lenda do Foco", "Complete 50 sessões de hiperfoco",
                    "$(star)", 1500, CounterChecker(50, _focus_sessions)),

        # Time of day
        Achievement("early_bird", "Madrugador", "Complete uma tarefa antes das 9h",
                    "$(sun)", 300, CounterChecker(1, lambda p: p.early_completions)),
        Achievement("night_owl", "Coruja Noturna", "Complete uma tarefa após as 22h",
                    "$(moon)", 300, CounterChecker(1, lambda p: p.late_completions)),

        # Streaks
        Achievement("streak_3", "Em Ritmo", "Mantenha um streak de 3 dias",
                    "$(flame)", 400, CounterChecker(3, _streak)),
        Achievement("streak_7", "Em Chamas", "Mantenha um streak de 7 dias",
                    "$(flame)", 1000, CounterChecker(7, _streak)),
        Achievement("streak_30", "Incendiário", "Mantenha um streak de 30 dias",
                    "$(flame)", 5000, CounterChecker(30, _streak)),

        # Subtasks
        Achievement("subtask_master", "Mestre das Subtarefas", "Complete 100 subtarefas",
                    "$(checklist)", 800, CounterChecker(100, lambda p: p.total_subtasks)),

        # Focused time
        Achievement("time_1h", "Primeira Hora", "Acumule 1 hora de tempo focado",
                    "$(clock)", 200, CounterChecker(60, _focus_minutes)),
        Achievement("time_10h", "Dez Horas", "Acumule 10 horas de tempo focado",
                    "$(clock)", 1000, CounterChecker(600, _focus_minutes)),
        Achievement("time_100h", "Centenário", "Acumule 100 horas de tempo focado",
                    "$(clock)", 5000, CounterChecker(6000, _focus_minutes)),
    ]

# ===== LEVELS =====

LEVEL_TITLES: Tuple[Tuple[int, str], ...] = (
    (30, "Mestre"),
    (20, "Adepto"),
    (10, "Iniciado"),
    (5, "Aprendiz"),
)

LEVEL_UP_REWARDS: Dict[int, LevelUpReward] = {
    reward.level: reward for reward in (
        LevelUpReward(5, "Aprendiz", "Você está começando sua jornada!", (
            'Tema personalizado "Matrix"',
            'Badge de Aprendiz',
            'Acesso a estatísticas básicas',
        )),
        LevelUpReward(10, "Iniciado", "Você está progredindo bem!", (
            'Novos ícones personalizados',
            'Badge de Iniciado',
            'Acesso a estatísticas avançadas',
            'Tema "Cyberpunk"',
        )),
        LevelUpReward(20, "Adepto", "Você está se tornando um mestre!", (
            'Tema exclusivo "Neon"',
            'Badge de Adepto',
            'Acesso a recursos beta',
            'Personalização de notificações',
        )),
        LevelUpReward(30, "Mestre", "Você é um verdadeiro mestre da produtividade!", (
            'Tema premium "Quantum"',
            'Badge de Mestre',
            'Acesso a todos os recursos',
            'Personalização completa da interface',
        )),
        LevelUpReward(50, "Lenda", "Você transcendeu os limites da produtividade!", (
            'Tema lendário "Cosmic"',
            'Badge de Lenda',
            'Acesso antecipado a novos recursos',
            'Personalização avançada de temas',
        )),
    )
}


def level_title(level: int) -> str:
    for min_level, title in LEVEL_TITLES:
        if level >= min_level:
            return title
    return "Iniciante"


def get_level_up_reward(level: int) -> Optional[LevelUpReward]:
    """Reward bundle of exactly this level, if any"""
    return LEVEL_UP_REWARDS.get(level)


def next_level_reward(level: int) -> Optional[LevelUpReward]:
    """First reward strictly above ``level``"""
    for reward_level in sorted(LEVEL_UP_REWARDS):
        if reward_level > level:
            return LEVEL_UP_REWARDS[reward_level]
    return None


__all__ = [
    'Achievement',
    'AchievementChecker',
    'CounterChecker',
    'AchievementCatalog',
    'LevelUpReward',
    'LEVEL_UP_REWARDS',
    'default_achievements',
    'level_title',
    'get_level_up_reward',
    'next_level_reward',
]
