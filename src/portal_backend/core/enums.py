"""Enumerations shared by the models, schemas and search layer.

Values are the strings exposed on the wire and stored in the database.
"""

from enum import Enum


class UserRole(str, Enum):
    CANDIDATE = "candidate"
    EMPLOYER = "employer"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class EmployeesCount(str, Enum):
    TINY = "1-10"
    SMALL = "11-50"
    MEDIUM = "51-200"
    LARGE = "201-500"
    ENTERPRISE = "500+"


class JobType(str, Enum):
    FULL_TIME = "Full-Time"
    PART_TIME = "Part-Time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    FREELANCE = "Freelance"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry Level"
    INTERMEDIATE = "Intermediate"
    EXPERT = "Expert"


class JobStatus(str, Enum):
    DRAFT = "Draft"
    OPEN = "Open"
    CLOSED = "Closed"
    ARCHIVED = "Archived"


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    REVIEWING = "Reviewing"
    INTERVIEWING = "Interviewing"
    SELECTED = "Selected"
    REJECTED = "Rejected"


class NotificationType(str, Enum):
    JOB_APPLIED = "JOB_APPLIED"
    APPLICATION_RECEIVED = "APPLICATION_RECEIVED"
    APPLICATION_STATUS_UPDATE = "APPLICATION_STATUS_UPDATE"
    JOB_POSTED = "JOB_POSTED"
    PROFILE_VIEWED = "PROFILE_VIEWED"
    WELCOME = "WELCOME"
    GENERAL = "GENERAL"


class EntityType(str, Enum):
    JOB = "job"
    APPLICATION = "application"
    USER = "user"
    COMPANY = "company"


class DevicePlatform(str, Enum):
    ANDROID = "android"
    IOS = "ios"


class ContentKey(str, Enum):
    ABOUT = "about"
    TERMS = "terms"
    PRIVACY = "privacy"
