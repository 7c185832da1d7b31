"""
Input validation for patient submissions.

Validation is advisory: the caller decides whether to proceed. The engine
itself never re-validates and will score an empty symptom set.
"""

from medguard.models.diagnosis_models import PatientSubmission


MAX_SYMPTOMS = 15
MIN_AGE = 0
MAX_AGE = 120

NO_SYMPTOMS_MESSAGE = "Please select at least one symptom"
TOO_MANY_SYMPTOMS_MESSAGE = (
    f"Too many symptoms selected: please select no more than {MAX_SYMPTOMS} "
    "for better accuracy"
)
INVALID_AGE_MESSAGE = f"Invalid age: please enter an age between {MIN_AGE} and {MAX_AGE}"


def validate(submission: PatientSubmission) -> list[str]:
    """
    Check a submission against structural constraints.

    All rules are evaluated; every violation is reported.

    Args:
        submission: Patient submission to check.

    Returns:
        Human-readable error messages. Empty when the submission is valid.
    """
    errors: list[str] = []

    if not submission.symptoms:
        errors.append(NO_SYMPTOMS_MESSAGE)

    if len(submission.symptoms) > MAX_SYMPTOMS:
        errors.append(TOO_MANY_SYMPTOMS_MESSAGE)

    if submission.age is not None and not MIN_AGE <= submission.age <= MAX_AGE:
        errors.append(INVALID_AGE_MESSAGE)

    return errors
