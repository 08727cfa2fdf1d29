"""
Shared fixtures.

The reference chart is 1990-01-01 12:00, longitude 116.40 (Beijing), clock
time (no true solar time): 己巳 丙子 丙寅 甲午, Day Master 丙.
"""

import pytest

from xuanshu.chart import UserProfile, assemble_chart
from xuanshu.settings import EngineSettings, StartAgeMethod


@pytest.fixture(scope="session")
def settings():
    return EngineSettings(_env_file=None)


@pytest.fixture(scope="session")
def approximate_settings():
    return EngineSettings(_env_file=None, start_age_method=StartAgeMethod.APPROXIMATE)


def make_profile(**overrides) -> UserProfile:
    fields = dict(
        name="测试",
        gender="male",
        birth_date="1990-01-01",
        birth_time="12:00",
        longitude=116.40,
        use_true_solar_time=False,
    )
    fields.update(overrides)
    return UserProfile(**fields)


@pytest.fixture(scope="session")
def reference_profile():
    return make_profile()


@pytest.fixture(scope="session")
def reference_chart(reference_profile, settings):
    return assemble_chart(reference_profile, settings)


@pytest.fixture(scope="session")
def female_reference_chart(settings):
    return assemble_chart(make_profile(gender="female"), settings)
