"""Bundled offline lesson catalog.

Available without the backend. Lesson ids here are shared with the remote
catalog so progress can be matched later.
"""

from collections.abc import Iterator

from soulingo.core.models import LearningModule, Lesson, LessonType


def _lesson(id: int, lesson_id: str, title: str, content: str, level: str,
            lesson_type: LessonType = LessonType.lecture_repetition) -> Lesson:
    return Lesson(
        id=id,
        lesson_id=lesson_id,
        title=title,
        content=content.strip(),
        level=level,
        lesson_type=lesson_type.value,
    )


MODULES: tuple[LearningModule, ...] = (
    LearningModule(
        id="a1",
        level="A1",
        title="Basic Level",
        lessons=[
            _lesson(
                1,
                "a1_l1",
                "Introduction & Daily Routine",
                "Hola. Me llamo Lucy. Soy estudiante. Estudio todos los días. "
                "Soy de Turquía. Me levanto temprano. Bebo agua. Voy a la escuela. "
                "Vuelvo a casa. Estudio español.",
                "A1",
            ),
            _lesson(
                2,
                "a1_l2",
                "Simple Questions",
                """
Q: ¿Cuántos dedos tienes?
A: Diez.

Q: ¿De qué color es la leche?
A: Blanca.

Q: ¿Qué mes viene después de enero?
A: Febrero.
""",
                "A1",
                LessonType.question_answer,
            ),
        ],
    ),
    LearningModule(
        id="a2",
        level="A2",
        title="Elementary Level",
        is_locked=True,
        lessons=[
            _lesson(
                3,
                "a2_l1",
                "Past Tense & Routines",
                """
Ayer estudié español. Vi un video corto. Fue útil.

Hoy conocí a una persona nueva. Ella fue muy amable. Hablamos un rato.

Vivo en una casa pequeña pero cómoda. Hay dos habitaciones, una cocina y un baño.

Mi habitación es luminosa y tranquila. Me gusta pasar tiempo allí.
""",
                "A2",
            ),
        ],
    ),
    LearningModule(
        id="b1",
        level="B1",
        title="Intermediate Level",
        is_locked=True,
        lessons=[
            _lesson(
                4,
                "b1_l1",
                "Future Plans & Complex Sentences",
                """
Normalmente me despierto temprano entre semana y empiezo el día con una caminata corta.

En el futuro, quiero trabajar en un campo relacionado con la tecnología.

Cuando empecé a aprender español, me sentía tímido e inseguro al hablar.
""",
                "B1",
            ),
        ],
    ),
)


def get_modules() -> list[LearningModule]:
    """Return deep copies of every bundled module, in level order."""
    return [module.model_copy(deep=True) for module in MODULES]


def get_module(module_id: str) -> LearningModule | None:
    for module in MODULES:
        if module.id == module_id:
            return module.model_copy(deep=True)
    return None


def iter_lessons() -> Iterator[Lesson]:
    for module in MODULES:
        yield from (lesson.model_copy() for lesson in module.lessons)


def find_lesson(lesson_id: str) -> Lesson | None:
    """Look up a bundled lesson by its ``lesson_id`` (e.g. "a1_l2")."""
    for lesson in iter_lessons():
        if lesson.lesson_id == lesson_id:
            return lesson
    return None
