"""Per-entity export tables.

Each table picks a fixed column set with Uzbek headers and turns flags and
dates into display text before the rows go through ``convert_to_csv``.
Records are backend JSON objects (camelCase keys).
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from talabahub.export.formatter import EXPORT_DATE_FORMAT, NO, YES, convert_to_csv, parse_datetime

Record = Mapping[str, Any]
Row = dict[str, Any]

ACTIVE = "Faol"
INACTIVE = "Nofaol"
PUBLISHED = "Nashr qilingan"
DRAFT = "Qoralama"


def _date(value: Any) -> str:  # noqa: ANN401
    parsed = parse_datetime(value)
    return parsed.strftime(EXPORT_DATE_FORMAT) if parsed else ""


def _active(record: Record) -> str:
    return ACTIVE if record.get("isActive") else INACTIVE


def _nested(record: Record, key: str, field: str) -> str:
    nested = record.get(key)
    return (nested.get(field) if isinstance(nested, Mapping) else None) or ""


def _full_name(person: Any) -> str:  # noqa: ANN401
    if not isinstance(person, Mapping):
        return ""
    parts = [person.get("firstName"), person.get("lastName")]
    return " ".join(str(p) for p in parts if p)


def _amount(value: Any) -> str:  # noqa: ANN401
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return "" if value is None else str(value)


def job_row(job: Record) -> Row:
    return {
        "Sarlavha": job.get("title"),
        "Kompaniya": _nested(job, "company", "name"),
        "Joylashuv": job.get("location"),
        "Ish turi": job.get("jobType"),
        "Maosh": job.get("salary") or "Kelishiladi",
        "Holat": _active(job),
        "Ko'rishlar": job.get("viewCount") or 0,
        "Yaratilgan": _date(job.get("createdAt")),
    }


def event_row(event: Record) -> Row:
    return {
        "Sarlavha": event.get("title"),
        "Turi": event.get("eventType"),
        "Sana": _date(event.get("eventDate")),
        "Joylashuv": event.get("location"),
        "Qatnashchilar": event.get("attendeesCount") or 0,
        "Holat": _active(event),
        "Yaratilgan": _date(event.get("createdAt")),
    }


def course_row(course: Record) -> Row:
    return {
        "Sarlavha": course.get("title"),
        "Hamkor": _nested(course, "partner", "name"),
        "Daraja": course.get("level"),
        "Davomiyligi": course.get("duration"),
        "Narx": course.get("price") or "Bepul",
        "Holat": _active(course),
        "O'quvchilar": course.get("enrollmentsCount") or 0,
        "Yaratilgan": _date(course.get("createdAt")),
    }


def user_row(user: Record) -> Row:
    return {
        "Ism": _full_name(user),
        "Email": user.get("email"),
        "Telefon": user.get("phone") or "",
        "Universitet": _nested(user, "university", "nameUz"),
        "Rol": user.get("role"),
        "Tasdiqlangan": YES if user.get("isEmailVerified") else NO,
        "Ro'yxatdan o'tgan": _date(user.get("createdAt")),
    }


def discount_row(discount: Record) -> Row:
    value = _amount(discount.get("discountValue"))
    amount = f"{value}%" if discount.get("discountType") == "percentage" else f"{value} so'm"
    return {
        "Sarlavha": discount.get("title"),
        "Brend": _nested(discount, "brand", "name"),
        "Chegirma": amount,
        "Boshlanish": _date(discount.get("validFrom")),
        "Tugash": _date(discount.get("validUntil")),
        "Holat": _active(discount),
        "Yaratilgan": _date(discount.get("createdAt")),
    }


def company_row(company: Record) -> Row:
    return {
        "Nom": company.get("name"),
        "Soha": company.get("industry") or "",
        "Joylashuv": company.get("location") or "",
        "Website": company.get("website") or "",
        "Email": company.get("email") or "",
        "Holat": _active(company),
        "Yaratilgan": _date(company.get("createdAt")),
    }


def brand_row(brand: Record) -> Row:
    return {
        "Nom": brand.get("name"),
        "Website": brand.get("website") or "",
        "Email": brand.get("email") or "",
        "Telefon": brand.get("phone") or "",
        "Holat": _active(brand),
        "Yaratilgan": _date(brand.get("createdAt")),
    }


def category_row(category: Record) -> Row:
    return {
        "Nom": category.get("name"),
        "Slug": category.get("slug"),
        "Turi": category.get("type"),
        "Holat": _active(category),
        "Yaratilgan": _date(category.get("createdAt")),
    }


def university_row(university: Record) -> Row:
    return {
        "Nom": university.get("name"),
        "Qisqa nom": university.get("shortName") or "",
        "Joylashuv": university.get("location") or "",
        "Website": university.get("website") or "",
        "Holat": _active(university),
        "Yaratilgan": _date(university.get("createdAt")),
    }


def blog_post_row(post: Record) -> Row:
    tags = post.get("tags")
    return {
        "Sarlavha": post.get("title"),
        "Muallif": _full_name(post.get("author")),
        "Teglar": ", ".join(str(t) for t in tags) if isinstance(tags, list) else "",
        "Holat": PUBLISHED if post.get("isPublished") else DRAFT,
        "Ko'rishlar": post.get("viewCount") or 0,
        "Yaratilgan": _date(post.get("createdAt")),
        "Yangilangan": _date(post.get("updatedAt")),
    }


@dataclass(frozen=True)
class ExportTable:
    """One export button: file prefix, column order and row builder."""

    filename_prefix: str
    headers: tuple[str, ...]
    build_row: Callable[[Record], Row]

    def rows(self, records: Sequence[Record]) -> list[Row]:
        return [self.build_row(r) for r in records]

    def to_csv(self, records: Sequence[Record]) -> str:
        return convert_to_csv(self.rows(records), self.headers)

    def filename(self, today: date) -> str:
        return f"{self.filename_prefix}-{today.isoformat()}.csv"


EXPORT_TABLES: dict[str, ExportTable] = {
    "jobs": ExportTable(
        "jobs",
        ("Sarlavha", "Kompaniya", "Joylashuv", "Ish turi", "Maosh", "Holat", "Ko'rishlar", "Yaratilgan"),
        job_row,
    ),
    "events": ExportTable(
        "events",
        ("Sarlavha", "Turi", "Sana", "Joylashuv", "Qatnashchilar", "Holat", "Yaratilgan"),
        event_row,
    ),
    "courses": ExportTable(
        "courses",
        ("Sarlavha", "Hamkor", "Daraja", "Davomiyligi", "Narx", "Holat", "O'quvchilar", "Yaratilgan"),
        course_row,
    ),
    "users": ExportTable(
        "users",
        ("Ism", "Email", "Telefon", "Universitet", "Rol", "Tasdiqlangan", "Ro'yxatdan o'tgan"),
        user_row,
    ),
    "discounts": ExportTable(
        "discounts",
        ("Sarlavha", "Brend", "Chegirma", "Boshlanish", "Tugash", "Holat", "Yaratilgan"),
        discount_row,
    ),
    "companies": ExportTable(
        "companies",
        ("Nom", "Soha", "Joylashuv", "Website", "Email", "Holat", "Yaratilgan"),
        company_row,
    ),
    "brands": ExportTable(
        "brands",
        ("Nom", "Website", "Email", "Telefon", "Holat", "Yaratilgan"),
        brand_row,
    ),
    "categories": ExportTable(
        "categories",
        ("Nom", "Slug", "Turi", "Holat", "Yaratilgan"),
        category_row,
    ),
    "universities": ExportTable(
        "universities",
        ("Nom", "Qisqa nom", "Joylashuv", "Website", "Holat", "Yaratilgan"),
        university_row,
    ),
    "blog-posts": ExportTable(
        "blog-posts",
        ("Sarlavha", "Muallif", "Teglar", "Holat", "Ko'rishlar", "Yaratilgan", "Yangilangan"),
        blog_post_row,
    ),
}


def get_export_table(entity: str) -> ExportTable:
    """Raises KeyError for an unknown entity."""
    return EXPORT_TABLES[entity]
