"""Test data generators for property-based testing using Hypothesis."""

import string
from typing import Dict, List, Optional, Tuple

from hypothesis import strategies as st
from hypothesis.strategies import composite

from portal_backend.core.enums import ExperienceLevel, JobType


@composite
def salary_bands(draw) -> Tuple[Optional[int], Optional[int]]:
    """Stored salary bands; either bound may be missing."""
    low = draw(st.one_of(st.none(), st.integers(min_value=0, max_value=300_000)))
    width = draw(st.integers(min_value=0, max_value=200_000))
    high = draw(st.one_of(st.none(), st.just((low or 0) + width)))
    return low, high


@composite
def requested_salary(draw) -> Tuple[int, int]:
    """A requested ``minSalary``/``maxSalary`` pair with min <= max."""
    low = draw(st.integers(min_value=0, max_value=300_000))
    high = draw(st.integers(min_value=low, max_value=low + 300_000))
    return low, high


@composite
def search_words(draw) -> str:
    """Plain words safe to embed in job titles."""
    return draw(st.text(alphabet=string.ascii_lowercase, min_size=3, max_size=12))


@composite
def skills_list(draw) -> List[str]:
    skills = [
        "python", "fastapi", "sql", "react", "docker", "kubernetes",
        "typescript", "aws", "celery", "redis", "graphql", "go",
    ]
    return draw(st.lists(st.sampled_from(skills), min_size=0, max_size=5, unique=True))


@composite
def job_filter_params(draw) -> Dict[str, str]:
    """Query parameter dicts mixing known filters with unknown keys."""
    params: Dict[str, str] = {}
    if draw(st.booleans()):
        params["type"] = draw(st.sampled_from([t.value for t in JobType]))
    if draw(st.booleans()):
        params["experienceLevel"] = draw(st.sampled_from([e.value for e in ExperienceLevel]))
    if draw(st.booleans()):
        params["location"] = draw(search_words())
    if draw(st.booleans()):
        params[draw(st.sampled_from(["unknownField", "foo", "bar_baz"]))] = draw(search_words())
    return params
