"""Search declarations for jobs, applications, companies, candidates, users and notifications."""

from portal_backend.auth.models import User
from portal_backend.models.application import Application
from portal_backend.models.candidate_profile import CandidateProfile
from portal_backend.models.company import Company
from portal_backend.models.job import Job
from portal_backend.models.notification import Notification
from .fields import FieldSpec, FieldType, SearchSchema


JOB_SEARCH = SearchSchema(
    name="job",
    fields={
        "id": FieldSpec(Job.id, FieldType.ID),
        "title": FieldSpec(Job.title, FieldType.TEXT, sortable=True),
        "description": FieldSpec(Job.description, FieldType.TEXT),
        "location": FieldSpec(Job.location, FieldType.TEXT, sortable=True),
        "type": FieldSpec(Job.type, FieldType.ENUM, sortable=True),
        "experienceLevel": FieldSpec(Job.experience_level, FieldType.ENUM, sortable=True),
        "status": FieldSpec(Job.status, FieldType.ENUM, sortable=True),
        "skillsRequired": FieldSpec(Job.skills_required, FieldType.TAGS),
        "minSalary": FieldSpec(Job.min_salary, FieldType.NUMBER, sortable=True),
        "maxSalary": FieldSpec(Job.max_salary, FieldType.NUMBER, sortable=True),
        "applicationDeadline": FieldSpec(Job.application_deadline, FieldType.DATE, sortable=True),
        "postedAt": FieldSpec(Job.posted_at, FieldType.DATE, sortable=True),
        "createdAt": FieldSpec(Job.created_at, FieldType.DATE, sortable=True),
        "companyId": FieldSpec(Job.company_id, FieldType.ID),
        "employerId": FieldSpec(Job.employer_id, FieldType.ID),
    },
    keyword_fields=("title", "description"),
    salary_overlap=("minSalary", "maxSalary"),
)

COMPANY_SEARCH = SearchSchema(
    name="company",
    fields={
        "id": FieldSpec(Company.id, FieldType.ID),
        "name": FieldSpec(Company.name, FieldType.TEXT, sortable=True),
        "description": FieldSpec(Company.description, FieldType.TEXT),
        "location": FieldSpec(Company.location, FieldType.TEXT, sortable=True),
        "employeesCount": FieldSpec(Company.employees_count, FieldType.ENUM),
        "createdAt": FieldSpec(Company.created_at, FieldType.DATE, sortable=True),
    },
    keyword_fields=("name", "description"),
)

# Queried as CandidateProfile joined to its User
CANDIDATE_SEARCH = SearchSchema(
    name="candidate",
    fields={
        "id": FieldSpec(CandidateProfile.id, FieldType.ID),
        "name": FieldSpec(User.name, FieldType.TEXT, sortable=True),
        "title": FieldSpec(CandidateProfile.title, FieldType.TEXT, sortable=True),
        "location": FieldSpec(CandidateProfile.location, FieldType.TEXT, sortable=True),
        "about": FieldSpec(CandidateProfile.about, FieldType.TEXT),
        "skills": FieldSpec(CandidateProfile.skills, FieldType.TAGS),
        "createdAt": FieldSpec(CandidateProfile.created_at, FieldType.DATE, sortable=True),
    },
    keyword_fields=("name", "title", "skills", "about"),
)

USER_SEARCH = SearchSchema(
    name="user",
    fields={
        "id": FieldSpec(User.id, FieldType.ID),
        "name": FieldSpec(User.name, FieldType.TEXT, sortable=True),
        "email": FieldSpec(User.email, FieldType.TEXT, sortable=True),
        "role": FieldSpec(User.role, FieldType.ENUM, sortable=True),
        "status": FieldSpec(User.status, FieldType.ENUM, sortable=True),
        "createdAt": FieldSpec(User.created_at, FieldType.DATE, sortable=True),
        "lastLogin": FieldSpec(User.last_login, FieldType.DATE, sortable=True),
    },
    keyword_fields=("name", "email"),
)

NOTIFICATION_SEARCH = SearchSchema(
    name="notification",
    fields={
        "id": FieldSpec(Notification.id, FieldType.ID),
        "title": FieldSpec(Notification.title, FieldType.TEXT),
        "message": FieldSpec(Notification.message, FieldType.TEXT),
        "type": FieldSpec(Notification.type, FieldType.ENUM),
        "entityType": FieldSpec(Notification.entity_type, FieldType.ENUM),
        "isRead": FieldSpec(Notification.is_read, FieldType.BOOLEAN),
        "createdAt": FieldSpec(Notification.created_at, FieldType.DATE, sortable=True),
    },
    keyword_fields=("title", "message"),
    page_size=20,
)

APPLICATION_SEARCH = SearchSchema(
    name="application",
    fields={
        "id": FieldSpec(Application.id, FieldType.ID),
        "jobId": FieldSpec(Application.job_id, FieldType.ID),
        "status": FieldSpec(Application.status, FieldType.ENUM, sortable=True),
        "createdAt": FieldSpec(Application.created_at, FieldType.DATE, sortable=True),
        "updatedAt": FieldSpec(Application.updated_at, FieldType.DATE, sortable=True),
    },
    default_exclude=(),
)
