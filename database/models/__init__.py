"""
Relational schema of the hiring platform.

Importing this package registers every model with the declarative base so
that string relationship targets resolve.
"""

from database.models.users import Role, User, Profile
from database.models.jobs import JobType, ShiftType, Department, Job
from database.models.candidates import Gender, Candidate, CandidatesOnJobs, ShortListed
from database.models.resumes import Resume, JobsAndResumes

# Declaration order of the entities
ENTITY_MODELS = (
    User,
    Profile,
    Job,
    Department,
    Candidate,
    CandidatesOnJobs,
    ShortListed,
    Resume,
    JobsAndResumes,
)

__all__ = [
    "Role",
    "JobType",
    "ShiftType",
    "Gender",
    "User",
    "Profile",
    "Job",
    "Department",
    "Candidate",
    "CandidatesOnJobs",
    "ShortListed",
    "Resume",
    "JobsAndResumes",
    "ENTITY_MODELS",
]
