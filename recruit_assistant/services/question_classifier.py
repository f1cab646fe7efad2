import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from recruit_assistant.services.text_utils import normalize

MIN_QUESTION_LENGTH = 8

NON_QUESTIONS = {
    "yes", "no", "ok", "okay", "thanks", "thank you", "thx", "hi", "hello",
    "hey", "bye", "goodbye", "sure", "cool", "great", "got it", "sounds good",
}

# Substring matches: "howdy" counts as "how". Known imprecision, kept as-is.
QUESTION_INDICATORS = (
    "how", "what", "when", "where", "why", "who", "which",
    "can i", "do i", "should i", "is there", "are there", "does",
    "do you", "will i", "is it", "can you", "?",
)


def is_question(message: str) -> bool:
    """True if ``message`` looks like a real question worth tracking."""
    text = (message or "").strip()
    if len(text) < MIN_QUESTION_LENGTH:
        return False
    if normalize(text) in NON_QUESTIONS:
        return False
    lowered = text.lower()
    return any(indicator in lowered for indicator in QUESTION_INDICATORS)


@dataclass(frozen=True)
class Category:
    name: str
    icon: str


SALARY = Category("Salary/Pay", "💰")
EXPERIENCE = Category("Day-to-Day/Experience", "🚔")
LOCATIONS = Category("Locations/Troop Assignments", "📍")
QUALIFICATIONS = Category("Qualifications/Requirements", "✅")
FITNESS = Category("Fitness Test", "💪")
HIRING = Category("Hiring Process", "📋")
BACKGROUND = Category("Background Check", "🔍")
BENEFITS = Category("Benefits", "🏥")
TRAINING = Category("Training/Academy", "🎓")
CONTACT = Category("Contact/Recruiter", "📞")
OTHER = Category("Other", "❓")


def _any(*phrases: str) -> Callable[[str], bool]:
    return lambda text: any(p in text for p in phrases)


def _words(*words: str) -> Callable[[str], bool]:
    """Whole-word match, so "earn" does not fire on "learn"."""
    pattern = re.compile(r"\b(?:%s)\b" % "|".join(map(re.escape, words)))
    return lambda text: pattern.search(text) is not None


def _either(*rules: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: any(rule(text) for rule in rules)


def _is_location(text: str) -> bool:
    if "troop" in text and "trooper" not in text:
        return True
    return _any("location", "where can i work", "where will i", "station",
                "assigned", "assignment", "headquarters", "county",
                "region", "relocat", "post ", "posts")(text)


# Evaluated top to bottom, first match wins. Order matters: the rules overlap.
RULES: List[Tuple[Category, Callable[[str], bool]]] = [
    (SALARY, _either(
        _any("salary", "pay", "paid", "money", "wage", "compensation", "income", "make a year",
             "how much do troopers", "how much does a trooper", "how much do you make",
             "how much will i make", "how much would i make"),
        _words("earn", "earns", "earning", "earnings", "raise", "raises"),
    )),
    (EXPERIENCE, _any("day to day", "day-to-day", "typical day", "daily", "what is it like",
                      "what's it like", "experience", "shift", "schedule", "hours", "duties")),
    (LOCATIONS, _is_location),
    (QUALIFICATIONS, _any("qualif", "require", "eligib", "minimum age",
                          "how old", "age limit", "degree", "college", "citizen",
                          "tattoo", "eyesight", "glasses", "driver's license", "diploma", " ged")),
    (FITNESS, _either(
        _any("fitness", "physical", "push-up", "push up", "pushup", "sit-up",
             "sit up", "situp", "mile", "pt test", "workout", "in shape"),
        _words("run", "runs", "running"),
    )),
    (HIRING, _any("hiring", "hire", "apply", "application", "process", "interview",
                  "how long does it take", "steps", "written test", "exam")),
    (BACKGROUND, _any("background", "criminal", "record", "polygraph", "drug",
                      "arrest", "felony", "misdemeanor", "credit", "dui")),
    (BENEFITS, _any("benefit", "insurance", "retire", "pension", "vacation",
                    "sick leave", "health", "dental", "401", "deferred comp", "holiday")),
    (TRAINING, _any("training", "academy", "train", "class", "weeks", "graduat")),
    (CONTACT, _any("contact", "recruiter", "phone", "email", "call", "talk to",
                   "speak", "reach", "get in touch")),
]

CATEGORIES: Dict[str, Category] = {c.name: c for c, _ in RULES}
CATEGORIES[OTHER.name] = OTHER


def categorize(question: str) -> Category:
    text = (question or "").lower()
    for category, matches in RULES:
        if matches(text):
            return category
    return OTHER


def category_by_name(name: str) -> Category:
    """Look a stored category name back up; unknown names map to ``OTHER``."""
    return CATEGORIES.get(name, OTHER)
