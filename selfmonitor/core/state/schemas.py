"""Canonical aggregate shape and request DTOs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Entity = Dict[str, Any]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NotificationSettings(_CamelModel):
    enabled: bool = True
    task_reminders: bool = Field(default=True, alias="taskReminders")
    habit_reminders: bool = Field(default=True, alias="habitReminders")
    pomodoro_complete: bool = Field(default=True, alias="pomodoroComplete")
    daily_summary: bool = Field(default=False, alias="dailySummary")


class PomodoroSettings(_CamelModel):
    focus_duration: int = Field(default=25, alias="focusDuration")
    short_break_duration: int = Field(default=5, alias="shortBreakDuration")
    long_break_duration: int = Field(default=15, alias="longBreakDuration")
    auto_start_breaks: bool = Field(default=False, alias="autoStartBreaks")
    auto_start_pomodoros: bool = Field(default=False, alias="autoStartPomodoros")


class UserSettings(_CamelModel):
    language: str = "en"
    calendar: str = "gregorian"
    currency: str = "toman"
    theme: str = "system"
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    pomodoro: PomodoroSettings = Field(default_factory=PomodoroSettings)


class FontSettings(_CamelModel):
    persian_font: str = Field(default="vazirmatn", alias="persianFont")
    english_font: str = Field(default="inter", alias="englishFont")
    use_persian_numerals: bool = Field(default=False, alias="usePersianNumerals")


class Planning(_CamelModel):
    gtd_inbox: List[Entity] = Field(default_factory=list, alias="gtdInbox")
    gtd_projects: List[Entity] = Field(default_factory=list, alias="gtdProjects")
    okr_cycles: List[Entity] = Field(default_factory=list, alias="okrCycles")
    weekly_reviews: List[Entity] = Field(default_factory=list, alias="weeklyReviews")


class PromptLibrary(_CamelModel):
    prompts: List[Entity] = Field(default_factory=list)
    collections: List[Entity] = Field(default_factory=list)


class JournalSettings(_CamelModel):
    open_router_key: str = Field(default="", alias="openRouterKey")
    preferred_model: str = Field(default="google/gemini-flash-1.5", alias="preferredModel")
    preferred_tone: str = Field(default="coach", alias="preferredTone")
    auto_analyze: bool = Field(default=False, alias="autoAnalyze")


class Journal(_CamelModel):
    entries: List[Entity] = Field(default_factory=list)
    settings: JournalSettings = Field(default_factory=JournalSettings)


class AppState(_CamelModel):
    """The whole persisted aggregate. Dumped by alias, it is the canonical defaults."""

    tasks: List[Entity] = Field(default_factory=list)
    projects: List[Entity] = Field(default_factory=list)
    lists: List[Entity] = Field(default_factory=list)
    tags: List[Entity] = Field(default_factory=list)
    events: List[Entity] = Field(default_factory=list)
    exercises: List[Entity] = Field(default_factory=list)
    sleep: List[Entity] = Field(default_factory=list)
    transactions: List[Entity] = Field(default_factory=list)
    courses: List[Entity] = Field(default_factory=list)
    books: List[Entity] = Field(default_factory=list)
    skills: List[Entity] = Field(default_factory=list)
    habits: List[Entity] = Field(default_factory=list)
    goals: List[Entity] = Field(default_factory=list)
    meditations: List[Entity] = Field(default_factory=list)
    pomodoro_sessions: List[Entity] = Field(default_factory=list, alias="pomodoroSessions")
    settings: UserSettings = Field(default_factory=UserSettings)
    planning: Planning = Field(default_factory=Planning)
    prompt_library: PromptLibrary = Field(default_factory=PromptLibrary, alias="promptLibrary")
    time_blocks: List[Entity] = Field(default_factory=list, alias="timeBlocks")
    journal: Journal = Field(default_factory=Journal)
    notification_rules: List[Entity] = Field(default_factory=list, alias="notificationRules")
    debts: List[Entity] = Field(default_factory=list)
    spiritual_obligations: List[Entity] = Field(default_factory=list, alias="spiritualObligations")
    birthdays: List[Entity] = Field(default_factory=list)
    font_settings: FontSettings = Field(default_factory=FontSettings, alias="fontSettings")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass(frozen=True)
class CollectionSpec:
    """How the mutation layer stamps entities of one top-level collection."""

    name: str
    created_at: bool = False
    updated_at: bool = False


COLLECTIONS: Dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec("tasks", created_at=True, updated_at=True),
        CollectionSpec("projects", created_at=True),
        CollectionSpec("lists", created_at=True),
        CollectionSpec("tags"),
        CollectionSpec("events"),
        CollectionSpec("exercises"),
        CollectionSpec("sleep"),
        CollectionSpec("transactions"),
        CollectionSpec("courses"),
        CollectionSpec("books"),
        CollectionSpec("skills"),
        CollectionSpec("habits", created_at=True),
        CollectionSpec("goals", created_at=True),
        CollectionSpec("meditations"),
        CollectionSpec("pomodoroSessions"),
        CollectionSpec("timeBlocks"),
        CollectionSpec("notificationRules"),
        CollectionSpec("debts", created_at=True),
        CollectionSpec("spiritualObligations", created_at=True),
        CollectionSpec("birthdays", created_at=True),
    )
}


# ---- Request bodies ----


class NotificationSettingsUpdate(_CamelModel):
    enabled: Optional[bool] = None
    task_reminders: Optional[bool] = Field(default=None, alias="taskReminders")
    habit_reminders: Optional[bool] = Field(default=None, alias="habitReminders")
    pomodoro_complete: Optional[bool] = Field(default=None, alias="pomodoroComplete")
    daily_summary: Optional[bool] = Field(default=None, alias="dailySummary")


class PomodoroSettingsUpdate(_CamelModel):
    focus_duration: Optional[int] = Field(default=None, ge=1, le=240, alias="focusDuration")
    short_break_duration: Optional[int] = Field(default=None, ge=1, le=120, alias="shortBreakDuration")
    long_break_duration: Optional[int] = Field(default=None, ge=1, le=240, alias="longBreakDuration")
    auto_start_breaks: Optional[bool] = Field(default=None, alias="autoStartBreaks")
    auto_start_pomodoros: Optional[bool] = Field(default=None, alias="autoStartPomodoros")


class SettingsUpdate(_CamelModel):
    language: Optional[Literal["en", "fa"]] = None
    calendar: Optional[Literal["jalali", "gregorian"]] = None
    currency: Optional[Literal["rial", "toman"]] = None
    theme: Optional[Literal["light", "dark", "system"]] = None
    notifications: Optional[NotificationSettingsUpdate] = None
    pomodoro: Optional[PomodoroSettingsUpdate] = None


class FontSettingsUpdate(_CamelModel):
    persian_font: Optional[Literal["vazirmatn", "iran-sans", "sahel", "shabnam", "estedad"]] = Field(
        default=None, alias="persianFont"
    )
    english_font: Optional[Literal["inter", "geist", "plus-jakarta-sans"]] = Field(default=None, alias="englishFont")
    use_persian_numerals: Optional[bool] = Field(default=None, alias="usePersianNumerals")


__all__ = [
    "AppState",
    "COLLECTIONS",
    "CollectionSpec",
    "FontSettings",
    "FontSettingsUpdate",
    "Journal",
    "Planning",
    "PromptLibrary",
    "SettingsUpdate",
    "UserSettings",
]
