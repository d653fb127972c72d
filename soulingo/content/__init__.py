"""
Content module - Lesson catalog bundled with the app.
"""

from .catalog import find_lesson, get_module, get_modules, iter_lessons

__all__ = ["find_lesson", "get_module", "get_modules", "iter_lessons"]
