from pydantic import field_validator

from app.schemas.common import CamelModel


class CourseInfo(CamelModel):
    title: str | None = None
    course_code: str | None = None
    instructor: str | None = None
    semester: str | None = None
    credits: str | int | None = None
    department: str | None = None


class SyllabusAssignment(CamelModel):
    name: str
    type: str | None = None  # homework, exam, project, quiz, paper, presentation
    due_date: str | None = None  # YYYY-MM-DD
    weight: float | str | None = None  # percent of the final grade


class SyllabusReading(CamelModel):
    title: str
    author: str | None = None
    required: bool | None = None


class SyllabusAnalysis(CamelModel):
    """Structured course information read from a syllabus.

    Sections the document does not have may come back as null; they are
    normalized to empty values.
    """
    is_syllabus: bool
    course_info: CourseInfo = CourseInfo()
    assignments: list[SyllabusAssignment] = []
    readings: list[SyllabusReading] = []
    grading_breakdown: dict[str, float | str | None] = {}

    @field_validator("course_info", mode="before")
    @classmethod
    def empty_course_info(cls, value):
        return {} if value is None else value

    @field_validator("assignments", "readings", mode="before")
    @classmethod
    def empty_list(cls, value):
        return [] if value is None else value

    @field_validator("grading_breakdown", mode="before")
    @classmethod
    def empty_breakdown(cls, value):
        return {} if value is None else value


class SyllabusTextRequest(CamelModel):
    text: str = ""


class SyllabusAnalysisResponse(CamelModel):
    success: bool = True
    analysis: SyllabusAnalysis
    text_length: int
