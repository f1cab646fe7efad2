import pytest

from recruit_assistant.services import question_classifier as qc
from recruit_assistant.services.question_classifier import categorize, category_by_name, is_question


@pytest.mark.parametrize("message", ["ok", "yes", "hi", "thanks", "Thank you!", "  Sounds good.  ", "", None])
def test_acknowledgements_are_not_questions(message):
    assert is_question(message) is False


def test_short_messages_are_rejected():
    assert is_question("how?") is False


@pytest.mark.parametrize("message", [
    "how much does a trooper make?",
    "What troop covers St. Louis",
    "Tell me about the academy?",
    "Is there a minimum age requirement",
])
def test_questions_are_accepted(message):
    assert is_question(message) is True


def test_statement_without_indicator_is_rejected():
    assert is_question("I like patrol cars a lot") is False


def test_indicator_matching_is_substring_based():
    # "howdy" contains "how"
    assert is_question("howdy partner") is True


@pytest.mark.parametrize("question, expected", [
    ("What is the starting salary?", qc.SALARY),
    ("How much do troopers get paid?", qc.SALARY),
    ("What is a typical day like for a trooper?", qc.EXPERIENCE),
    ("What troop covers St. Louis?", qc.LOCATIONS),
    ("Where can I work after graduation?", qc.LOCATIONS),
    ("What are the minimum qualifications?", qc.QUALIFICATIONS),
    ("How many push-ups are in the fitness test?", qc.FITNESS),
    ("How long is the hiring process?", qc.HIRING),
    ("Will a misdemeanor show up on the background check?", qc.BACKGROUND),
    ("Do troopers get a pension?", qc.BENEFITS),
    ("How long is the academy?", qc.TRAINING),
    ("What will I learn at the academy?", qc.TRAINING),
    ("How much do I need to run?", qc.FITNESS),
    ("How much can I earn as a trooper?", qc.SALARY),
    ("How do I contact a recruiter?", qc.CONTACT),
    ("Can I bring my dog?", qc.OTHER),
])
def test_categorize(question, expected):
    assert categorize(question) == expected


def test_salary_category_has_icon():
    category = categorize("What is the starting salary?")
    assert category.name == "Salary/Pay"
    assert category.icon == "💰"


def test_trooper_alone_is_not_a_location():
    assert categorize("What does a trooper do on the road?") != qc.LOCATIONS


def test_rule_order_salary_before_training():
    # mentions both pay and the academy; salary comes first
    assert categorize("What is the pay during the academy?") == qc.SALARY


def test_pay_words_must_be_whole_words():
    # "learn" contains "earn", "praise" contains "raise"
    assert categorize("Where do recruits learn to drive?") != qc.SALARY
    assert categorize("Do instructors praise good recruits?") != qc.SALARY


def test_category_by_name_round_trip():
    assert category_by_name("Benefits") == qc.BENEFITS
    assert category_by_name("Something else") == qc.OTHER
    assert category_by_name(None) == qc.OTHER
