from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone

COMPUTE_VERSION = "1.0"

HIREABILITY_WEIGHTS = {"skill": 0.40, "academic": 0.25, "experience": 0.25, "preference": 0.10}
MATCH_WEIGHTS = {"skill": 0.4, "academic": 0.2, "experience": 0.3, "preference": 0.1}

DAYS_PER_MONTH = 30
PREFERENCE_FIT_BASELINE = 0.7


@dataclass(frozen=True)
class SkillEntry:
    skill_id: str
    proficiency: int
    years_of_experience: float = 0.0


@dataclass(frozen=True)
class ExperienceRecord:
    start_date: datetime
    end_date: datetime | None = None


@dataclass(frozen=True)
class PreferenceEntry:
    preference_id: str
    priority: int


@dataclass(frozen=True)
class CandidateSnapshot:
    candidate_id: int
    skills: tuple[SkillEntry, ...] = ()
    gpa: float | None = None
    completed_course_count: int = 0
    experiences: tuple[ExperienceRecord, ...] = ()
    project_count: int = 0
    preferences: tuple[PreferenceEntry, ...] = ()
    # Reference time for open-ended experience records; None means "now".
    as_of: datetime | None = None


@dataclass(frozen=True)
class PostingSkillRequirement:
    skill_id: str
    importance_weight: int = 1
    required: bool = False


@dataclass(frozen=True)
class PostingSnapshot:
    posting_id: int
    skills: tuple[PostingSkillRequirement, ...] = ()
    gpa_threshold: float | None = None


@dataclass
class CandidateScoreResult:
    candidate_id: int
    skill_score: float
    academic_score: float
    experience_score: float
    preference_score: float
    hireability_score: float
    compute_version: str
    details: dict = field(default_factory=dict)


@dataclass
class MatchScoreResult:
    """Pairwise fit on the 0-100 scale, each component rounded to two decimals."""

    candidate_id: int
    posting_id: int
    total_score: float
    skill_score: float
    academic_score: float
    experience_score: float
    preference_score: float
    compute_version: str
    details: dict = field(default_factory=dict)


def naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted to UTC; naive ones are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class ScoreCalculator:
    """Pure weighted-sum scoring for candidates and candidate/posting pairs.

    Nothing here touches the database; sparse input degrades to low scores
    instead of raising.
    """

    def __init__(self, compute_version: str = COMPUTE_VERSION):
        self.compute_version = compute_version

    def compute_candidate_metrics(self, snapshot: CandidateSnapshot) -> CandidateScoreResult:
        now = snapshot.as_of or datetime.utcnow()
        skill_score = self._skill_score(snapshot.skills)
        academic_score = self._academic_score(snapshot.gpa, snapshot.completed_course_count)
        total_months = self.total_experience_months(snapshot.experiences, now)
        experience_score = self._experience_score(total_months, snapshot.project_count)
        preference_score = self._preference_score(snapshot.preferences)

        hireability = clamp(
            skill_score * HIREABILITY_WEIGHTS["skill"]
            + academic_score * HIREABILITY_WEIGHTS["academic"]
            + experience_score * HIREABILITY_WEIGHTS["experience"]
            + preference_score * HIREABILITY_WEIGHTS["preference"]
        )

        return CandidateScoreResult(
            candidate_id=snapshot.candidate_id,
            skill_score=skill_score,
            academic_score=academic_score,
            experience_score=experience_score,
            preference_score=preference_score,
            hireability_score=hireability,
            compute_version=self.compute_version,
            details={
                "skills_count": len(snapshot.skills),
                "experiences_count": len(snapshot.experiences),
                "projects_count": snapshot.project_count,
                "preferences_count": len(snapshot.preferences),
                "total_experience_months": round(total_months, 2),
                "as_of": now.isoformat(),
            },
        )

    def compute_match_score(self, candidate: CandidateSnapshot, posting: PostingSnapshot) -> MatchScoreResult:
        skill_match, skill_details = self._skill_match(candidate, posting)
        academic_fit, academic_details = self._academic_fit(candidate.gpa, posting.gpa_threshold)
        experience_match, experience_details = self._experience_match(candidate)
        preference_fit = PREFERENCE_FIT_BASELINE

        total = (
            skill_match * MATCH_WEIGHTS["skill"]
            + academic_fit * MATCH_WEIGHTS["academic"]
            + experience_match * MATCH_WEIGHTS["experience"]
            + preference_fit * MATCH_WEIGHTS["preference"]
        )

        return MatchScoreResult(
            candidate_id=candidate.candidate_id,
            posting_id=posting.posting_id,
            total_score=self._as_percent(total),
            skill_score=self._as_percent(skill_match),
            academic_score=self._as_percent(academic_fit),
            experience_score=self._as_percent(experience_match),
            preference_score=self._as_percent(preference_fit),
            compute_version=self.compute_version,
            details={
                "skill": skill_details,
                "academic": academic_details,
                "experience": experience_details,
                "preference": {"baseline": PREFERENCE_FIT_BASELINE},
            },
        )

    @staticmethod
    def total_experience_months(experiences: tuple[ExperienceRecord, ...], now: datetime) -> float:
        now = naive_utc(now)
        total = 0.0
        for record in experiences:
            end = naive_utc(record.end_date) if record.end_date else now
            seconds = (end - naive_utc(record.start_date)).total_seconds()
            total += max(0.0, seconds / (DAYS_PER_MONTH * 86400))
        return total

    @staticmethod
    def _skill_score(skills: tuple[SkillEntry, ...]) -> float:
        if not skills:
            return 0.0
        points = 0.0
        for skill in skills:
            years = max(0.0, skill.years_of_experience or 0.0)
            points += skill.proficiency / 5 + min(years / 5, 1) * 0.5
        return clamp(100 * points / (len(skills) * 1.5))

    @staticmethod
    def _academic_score(gpa: float | None, completed_course_count: int) -> float:
        score = 0.0
        if gpa is not None:
            score += (gpa / 4.0) * 60
        score += min(max(completed_course_count, 0) / 20, 1) * 40
        return clamp(score)

    @staticmethod
    def _experience_score(total_months: float, project_count: int) -> float:
        score = min(total_months / 24, 1) * 70
        score += min(max(project_count, 0) / 5, 1) * 30
        return clamp(score)

    @staticmethod
    def _preference_score(preferences: tuple[PreferenceEntry, ...]) -> float:
        if not preferences:
            return 0.0
        total = sum(pref.priority / 5 for pref in preferences)
        return clamp(100 * total / len(preferences))

    @staticmethod
    def _skill_match(candidate: CandidateSnapshot, posting: PostingSnapshot) -> tuple[float, dict]:
        if not posting.skills:
            return 0.5, {"reason": "posting declares no skills"}

        held = {skill.skill_id: skill.proficiency for skill in candidate.skills}
        total_weight = 0.0
        matched_weight = 0.0
        matched: list[str] = []
        missing_required: list[str] = []
        for req in posting.skills:
            weight = req.importance_weight or 1
            total_weight += weight
            if req.skill_id in held:
                matched_weight += clamp(held[req.skill_id] / 5, 0.0, 1.0) * weight
                matched.append(req.skill_id)
            elif req.required:
                missing_required.append(req.skill_id)

        score = matched_weight / total_weight if total_weight > 0 else 0.0
        return score, {
            "total_skills": len(posting.skills),
            "matched_skills": matched,
            "missing_required_skills": missing_required,
        }

    @staticmethod
    def _academic_fit(gpa: float | None, threshold: float | None) -> tuple[float, dict]:
        if gpa is None:
            return 0.5, {"reason": "no gpa on record"}
        if threshold is not None:
            meets = gpa >= threshold
            return (1.0 if meets else 0.3), {"gpa": gpa, "threshold": threshold, "meets_threshold": meets}
        return min(gpa / 4.0, 1.0), {"gpa": gpa}

    @staticmethod
    def _experience_match(candidate: CandidateSnapshot) -> tuple[float, dict]:
        level = len(candidate.experiences) + candidate.project_count * 0.5
        if level >= 3:
            score = 1.0
        elif level >= 2:
            score = 0.8
        elif level >= 1:
            score = 0.6
        else:
            score = 0.3
        return score, {
            "experience_records": len(candidate.experiences),
            "projects": candidate.project_count,
            "level": level,
        }

    @staticmethod
    def _as_percent(fraction: float) -> float:
        return round(clamp(fraction * 100), 2)
