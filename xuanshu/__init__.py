"""
xuanshu: a deterministic Four Pillars (BaZi) calculation engine.

This package COMPUTES and FLAGS. Long-form interpretation is the LLM's
job; the reading context it needs comes from xuanshu.context.
"""

from xuanshu.annual import AnnualFortune, Rating, evaluate_year
from xuanshu.chart import BaziChart, UserProfile, assemble_chart
from xuanshu.errors import InvalidBirthData, UnsupportedCalendarRange, XuanshuError
from xuanshu.interpret import (
    PillarInterpretation,
    interpret_annual_pillar,
    interpret_day_pillar,
    interpret_hour_pillar,
    interpret_luck_pillar,
    interpret_month_pillar,
    interpret_year_pillar,
)
from xuanshu.luck import Gender
from xuanshu.settings import EngineSettings, StartAgeMethod, ZiHourPolicy, get_settings

__version__ = "0.1.0"

__all__ = [
    "AnnualFortune",
    "BaziChart",
    "EngineSettings",
    "Gender",
    "InvalidBirthData",
    "PillarInterpretation",
    "Rating",
    "StartAgeMethod",
    "UnsupportedCalendarRange",
    "UserProfile",
    "XuanshuError",
    "ZiHourPolicy",
    "assemble_chart",
    "evaluate_year",
    "get_settings",
    "interpret_annual_pillar",
    "interpret_day_pillar",
    "interpret_hour_pillar",
    "interpret_luck_pillar",
    "interpret_month_pillar",
    "interpret_year_pillar",
]
