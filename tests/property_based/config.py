"""Configuration for property-based testing framework."""

import os

from hypothesis import HealthCheck, Verbosity, settings


class PropertyTestConfig:
    """Hypothesis profiles shared by the property tests."""

    # Examples per property in the default profile
    MIN_ITERATIONS = 100

    # Examples per property when exploring locally
    MAX_ITERATIONS = 500

    # Per-example deadline in milliseconds; SQLite round trips dominate
    DEADLINE = 5000

    @classmethod
    def configure_hypothesis(cls):
        """Register the profiles and load the one named by HYPOTHESIS_PROFILE."""
        suppressed = [HealthCheck.function_scoped_fixture, HealthCheck.too_slow]

        settings.register_profile(
            "default",
            max_examples=cls.MIN_ITERATIONS,
            deadline=cls.DEADLINE,
            suppress_health_check=suppressed,
            print_blob=True,
        )

        # Deterministic for CI reproducibility
        settings.register_profile(
            "ci",
            max_examples=cls.MIN_ITERATIONS,
            deadline=cls.DEADLINE,
            verbosity=Verbosity.quiet,
            database=None,
            derandomize=True,
            suppress_health_check=suppressed,
            print_blob=True,
        )

        settings.register_profile(
            "dev",
            max_examples=cls.MAX_ITERATIONS,
            deadline=cls.DEADLINE,
            verbosity=Verbosity.verbose,
            suppress_health_check=suppressed,
            print_blob=True,
        )

        settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))
