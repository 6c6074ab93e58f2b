"""
Session Tracker
Turns the questions a visitor asked into the material for a personalized
presentation deck: problem/solution pairs, category breakdown and ROI.
"""
import datetime as dt
import re
from collections import Counter
from typing import Dict, List, Optional

from src.models.persona import PersonaScores
from src.models.presentation import (
    PresentationData,
    ProblemSolution,
    ROISummary,
    SessionSummary,
)
from src.models.session import Session, UserQuery

GENERAL_CATEGORY = "General Inquiry"

# Evaluated in order, first match wins
PROBLEM_CATEGORIES = [
    ("Data Access", [r"find", r"get", r"show", r"where", r"access", r"need data", r"view", r"display"]),
    ("Analysis", [r"why", r"analy[sz]e", r"understand", r"explain", r"insight", r"breakdown", r"deep dive"]),
    ("Comparison", [r"compare", r"versus", r"vs", r"difference", r"better", r"against"]),
    ("Trends", [r"trend", r"forecast", r"predict", r"future", r"growth", r"projection"]),
    ("Reporting", [r"report", r"export", r"share", r"presentation", r"summary", r"document"]),
    ("Performance", [r"how is", r"performing", r"results", r"metrics", r"kpi", r"measure"]),
    ("Competitive", [r"competitor", r"competitive", r"market share", r"benchmark"]),
    ("Territory", [r"territor", r"region", r"area", r"geographic", r"market", r"location"]),
    ("ROI", [r"roi", r"return", r"investment", r"cost", r"value", r"savings", r"prove"]),
]

_COMPILED_CATEGORIES = [
    (category, re.compile(r"\b(?:" + "|".join(patterns) + r")", re.IGNORECASE))
    for category, patterns in PROBLEM_CATEGORIES
]

PROBLEM_TEMPLATES = {
    "Data Access": "Difficulty accessing: {subject}",
    "Analysis": "Need to understand: {subject}",
    "Comparison": "Unable to compare: {subject}",
    "Trends": "Tracking trends for: {subject}",
    "Reporting": "Creating reports on: {subject}",
    "Performance": "Monitoring performance of: {subject}",
    "Competitive": "Competitive intelligence needed for: {subject}",
    "Territory": "Territory analysis needed for: {subject}",
    "ROI": "Proving value and ROI for: {subject}",
}

BEFORE_AFTER = {
    "Data Access": ("Manually searching through multiple spreadsheets and databases", "Instant access via {feature}"),
    "Analysis": ("Hours spent in Excel creating pivot tables and formulas", "AI-powered insights delivered in seconds"),
    "Comparison": ("Building comparison tables manually across data sources", "Side-by-side comparison with one click"),
    "Trends": ("Manually tracking data points over time in spreadsheets", "Automated trend analysis with predictive insights"),
    "Reporting": ("Spending 2-3 hours creating presentation slides", "Auto-generated reports in minutes"),
    "Performance": ("Waiting for weekly reports from multiple sources", "Real-time performance dashboards"),
    "Competitive": ("Manual research across news, reports, and databases", "Consolidated competitive intelligence dashboard"),
    "Territory": ("Analyzing territories manually with static reports", "Dynamic territory intelligence with real-time insights"),
    "ROI": ("Guessing at value without concrete data", "Data-driven ROI calculations with proof points"),
}
DEFAULT_BEFORE_AFTER = ("Manual, time-consuming process", "Automated solution via BevGenie AI")

# Estimated minutes saved per question
MINUTES_SAVED = {
    "Data Access": 30,
    "Analysis": 120,
    "Comparison": 60,
    "Trends": 90,
    "Reporting": 180,
    "Performance": 45,
    "Competitive": 240,
    "Territory": 90,
    "ROI": 150,
}
DEFAULT_MINUTES_SAVED = 60
HOURLY_RATE = 75

_LEADING_PHRASE = re.compile(
    r"^(?:show me|find|get|how|what|why|where|when|can you|tell me|explain)\s+", re.IGNORECASE
)


def categorize_problem(query: str) -> str:
    for category, pattern in _COMPILED_CATEGORIES:
        if pattern.search(query):
            return category
    return GENERAL_CATEGORY


def extract_subject(query: str) -> str:
    """Strip the question scaffolding ("show me", "what", trailing '?')."""
    subject = _LEADING_PHRASE.sub("", query.strip())
    return subject.rstrip("?").strip()


def refine_problem_statement(query: str, problem_type: str) -> str:
    template = PROBLEM_TEMPLATES.get(problem_type, "Challenge with: {subject}")
    return template.format(subject=extract_subject(query))


def format_duration(minutes: int) -> str:
    if minutes < 1:
        return "Less than 1 minute"
    if minutes == 1:
        return "1 minute"
    if minutes < 60:
        return f"{minutes} minutes"

    hours, remaining = divmod(minutes, 60)
    return (
        f"{hours} hour{'s' if hours > 1 else ''} "
        f"{remaining} minute{'s' if remaining != 1 else ''}"
    )


class SessionTracker:
    """
    Read-side view over the queries tracked for one session.

    Queries are appended by the stream orchestrator after each completed turn;
    this class only derives presentation material from them.
    """

    def __init__(
        self,
        persona: PersonaScores,
        queries: Optional[List[UserQuery]] = None,
        session_start: Optional[dt.datetime] = None
    ):
        self.persona = persona
        self.queries = list(queries or [])
        self.session_start = session_start or dt.datetime.now(dt.UTC)

    @classmethod
    def from_session(cls, session: Session) -> "SessionTracker":
        return cls(session.persona, session.tracked_queries, session.session_start)

    @staticmethod
    def build_query(
        query: str,
        context: str = "chat",
        solution_provided: str = "Solution being generated...",
        feature_used: str = "BevGenie AI"
    ) -> UserQuery:
        """Create a categorized UserQuery ready to be tracked."""
        return UserQuery(
            query=query.strip(),
            context=context,
            problem_type=categorize_problem(query),
            solution_provided=solution_provided,
            feature_used=feature_used,
        )

    def get_problem_solution_pairs(self) -> List[ProblemSolution]:
        pairs = []
        for q in self.queries:
            before, after = BEFORE_AFTER.get(q.problem_type, DEFAULT_BEFORE_AFTER)
            pairs.append(ProblemSolution(
                problem_statement=refine_problem_statement(q.query, q.problem_type),
                user_question=q.query,
                bevgenie_solution=q.solution_provided,
                feature_used=q.feature_used,
                before_state=before,
                after_state=after.format(feature=q.feature_used),
                time_saved=MINUTES_SAVED.get(q.problem_type, DEFAULT_MINUTES_SAVED),
            ))
        return pairs

    def get_category_breakdown(self) -> Dict[str, int]:
        return dict(Counter(q.problem_type for q in self.queries))

    def get_top_category(self) -> str:
        """Most asked category; ties go to the category asked first."""
        breakdown = self.get_category_breakdown()
        if not breakdown:
            return "General"
        return max(breakdown, key=breakdown.get)

    def get_session_duration(self, now: Optional[dt.datetime] = None) -> str:
        now = now or dt.datetime.now(dt.UTC)
        start = self.session_start
        if start.tzinfo is None:
            start = start.replace(tzinfo=dt.UTC)
        minutes = int((now - start).total_seconds() // 60)
        return format_duration(minutes)

    def get_presentation_data(self, now: Optional[dt.datetime] = None) -> PresentationData:
        pairs = self.get_problem_solution_pairs()
        total_minutes = sum(pair.time_saved for pair in pairs)

        return PresentationData(
            persona=self.persona,
            session=SessionSummary(
                duration=self.get_session_duration(now),
                queries_asked=len(self.queries),
                problems_solved=len(pairs),
            ),
            actual_questions=[q.query for q in self.queries],
            problem_solutions=pairs,
            category_breakdown=self.get_category_breakdown(),
            roi=ROISummary(
                total_minutes_saved=total_minutes,
                hours_saved=round(total_minutes / 60, 1),
                cost_saved=round(total_minutes / 60 * HOURLY_RATE),
                efficiency_gain=round(total_minutes / (total_minutes + 15) * 100),
            ),
        )
